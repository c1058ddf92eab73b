from typing import Dict, List
from .models import Subject

SUBJECTS: List[Subject] = [
    Subject(
        id="wiskunde-b",
        name="Wiskunde B",
        icon="📐",
        color_tag="blue",
        description="Differentieer, integreer en meetkunde oefeningen.",
        prompt_context=(
            "Je bent een Wiskunde B docent. Focus op exacte berekeningen, bewijzen, differentiëren, "
            "integreren en meetkunde. Gebruik ALTIJD LaTeX voor formules (bijv. $x^2$ of $$\\int f(x) dx$$). "
            "Gebruik stapsgewijze uitleg."
        ),
        exam_domains=[
            "Functies en grafieken",
            "Differentiaal- en integraalrekening",
            "Goniometrische functies",
            "Meetkunde met coördinaten",
            "Meetkunde (Euclidisch)",
            "Keuzeonderwerpen",
        ],
    ),
    Subject(
        id="wiskunde-a",
        name="Wiskunde A",
        icon="📊",
        color_tag="cyan",
        description="Statistiek, kansrekening en algebra.",
        prompt_context=(
            "Je bent een Wiskunde A docent. Focus op kansrekening, statistiek, hypothesetoetsen en formules "
            "herschrijven. Gebruik ALTIJD LaTeX voor formules. Help leerlingen verhaaltjessommen te vertalen "
            "naar berekeningen. Leg de nadruk op inzicht en toepassingen."
        ),
        exam_domains=["Algebra en tellen", "Verbanden", "Verandering", "Statistiek", "Kansrekening", "Vaardigheden"],
    ),
    Subject(
        id="engels",
        name="Engels",
        icon="🇬🇧",
        color_tag="indigo",
        description="Leesvaardigheid, grammatica en vocabulaire.",
        prompt_context=(
            "Je bent een Engels docent. Het Centraal Eindexamen draait vooral om tekstverklaring "
            "(Leesvaardigheid). Focus op leesstrategieën (skimming/scanning), signaalwoorden, tekstdoelen en "
            "idioom. Bij oefenvragen over leesvaardigheid: geef ALTIJD een korte tekst (tekstfragment) in het "
            "Engels waar de vraag over gaat, anders kan de leerling de vraag niet beantwoorden. Geef feedback "
            "in het Nederlands."
        ),
        exam_domains=[
            "Leesvaardigheid",
            "Kijk- en luistervaardigheid",
            "Gespreksvaardigheid",
            "Schrijfvaardigheid",
            "Literatuur",
            "Oriëntatie op studie en beroep",
        ],
    ),
    Subject(
        id="natuurkunde",
        name="Natuurkunde",
        icon="⚡",
        color_tag="purple",
        description="Mechanica, elektriciteit en kwantumfysica.",
        prompt_context=(
            "Je bent een Natuurkunde docent. Help met krachten, energie, elektriciteit en modellen. Gebruik "
            "ALTIJD LaTeX voor formules en eenheden (bijv. $F = m \\cdot a$). Vraag de leerling altijd om eerst "
            "zelf een schets of formule te bedenken."
        ),
        exam_domains=[
            "Golven en straling",
            "Beweging en wisselwerking (Krachten)",
            "Lading en veld (Elektriciteit)",
            "Straling en materie",
            "Quantumwereld",
            "Relativiteit",
        ],
    ),
    Subject(
        id="scheikunde",
        name="Scheikunde",
        icon="🧪",
        color_tag="green",
        description="Reacties, molberekeningen en organische chemie.",
        prompt_context=(
            "Je bent een Scheikunde docent. Focus op reactievergelijkingen, molrekenen, bindingen en organische "
            "chemie. Gebruik LaTeX voor chemische formules waar nodig (bijv. $H_2O$, $CO_2$). Wees precies met "
            "Binas-verwijzingen."
        ),
        exam_domains=[
            "Stoffen en materialen",
            "Chemische processen en behoudswetten",
            "Ontwikkeling van chemische kennis",
            "Innovatie en onderzoek",
            "Industriële (groene) chemie",
        ],
    ),
    Subject(
        id="biologie",
        name="Biologie",
        icon="🧬",
        color_tag="emerald",
        description="DNA, ecologie, evolutie en het menselijk lichaam.",
        prompt_context=(
            "Je bent een Biologie docent. Focus op fysiologie, DNA/RNA, genetica, ecologie en evolutie. Gebruik "
            "de juiste vakterminologie. Leg processen (zoals fotosynthese of eiwitsynthese) stap voor stap uit."
        ),
        exam_domains=[
            "Zelfregulatie (DNA/Eiwitten)",
            "Zelforganisatie (Cellen/Organen)",
            "Interactie (Ecologie)",
            "Reproductie (Voortplanting)",
            "Evolutie",
            "Stofwisseling",
        ],
    ),
    Subject(
        id="economie",
        name="Economie",
        icon="📈",
        color_tag="red",
        description="Markten, speltheorie en macro-economie.",
        prompt_context=(
            "Je bent een Economie docent. Help met vraag en aanbod, elasticiteiten en macro-economische "
            "modellen. Gebruik LaTeX voor breuken en formules. Leg concepten uit met praktijkvoorbeelden."
        ),
        exam_domains=[
            "Schaarste",
            "Ruil",
            "Markt",
            "Ruilen over de tijd",
            "Samenwerken en onderhandelen",
            "Risico en informatie",
            "Welvaart en groei",
        ],
    ),
    Subject(
        id="geschiedenis",
        name="Geschiedenis",
        icon="🏛️",
        color_tag="yellow",
        description="Kenmerkende aspecten en historische context.",
        prompt_context=(
            "Je bent een Geschiedenis docent. Focus op de tijdvakken en kenmerkende aspecten. Help leerlingen "
            "verbanden te leggen tussen gebeurtenissen (oorzaak-gevolg)."
        ),
        exam_domains=[
            "Tijdvakken 1 t/m 10",
            "Historische Context: Steden en Burgers",
            "Historische Context: Verlichting",
            "Historische Context: China",
            "Historische Context: Duitsland",
            "Historische Context: Koude Oorlog",
        ],
    ),
    Subject(
        id="nederlands",
        name="Nederlands",
        icon="📚",
        color_tag="orange",
        description="Tekstanalyse, argumentatie en literatuur.",
        prompt_context=(
            "Je bent een Nederlands docent. Help met tekstanalyse, drogredenen herkennen, en samenvatten. Let op "
            "spelling en formulering. Bij oefenvragen over tekstbegrip: geef ALTIJD een korte tekst "
            "(tekstfragment) waar de vraag over gaat."
        ),
        exam_domains=[
            "Leesvaardigheid (Tekstanalyse)",
            "Mondelinge taalvaardigheid",
            "Schrijfvaardigheid",
            "Argumentatieve vaardigheden",
            "Literatuurgeschiedenis",
        ],
    ),
]

_BY_ID: Dict[str, Subject] = {s.id: s for s in SUBJECTS}


def get_subject(subject_id: str) -> Subject:
    """Look up a catalog entry; raises KeyError for unknown ids."""
    return _BY_ID[subject_id]
