from ..config import settings
from ..models import SessionMode, SessionScore, Subject, UserProfile

SYSTEM_INSTRUCTION_BASE = """
Je bent 'ExamenBuddy', een vriendelijke, geduldige en zeer kundige eindexamentrainer voor middelbare scholieren in Nederland.
Je doel is om de leerling te helpen slagen voor het centraal eindexamen of schoolexamens.

Richtlijnen:
1. Spreek altijd Nederlands.
2. Geef niet direct het antwoord op een oefenvraag. Gebruik de socratische methode: stel vragen terug om de leerling zelf tot het antwoord te laten komen.
3. Als de leerling vastloopt, geef dan een kleine hint of leg de onderliggende theorie uit.
4. Wees bemoedigend en positief. Examenstress is echt.
5. Gebruik opmaak (Markdown) om je antwoorden leesbaar te maken (bijv. bold voor belangrijke termen, lijsten voor stappen).
6. BELANGRIJK: Gebruik LaTeX voor alle wiskundige en natuurwetenschappelijke formules.
   - Gebruik enkele dollartekens voor inline formules: $E = mc^2$
   - Gebruik dubbele dollartekens voor losstaande blokken: $$ x = \\frac{-b \\pm \\sqrt{D}}{2a} $$
7. Als een leerling een foto stuurt van een opgave, analyseer deze dan grondig.
"""

LEVEL_STRATEGY = {
	"vmbo-tl": "Werk concreet en in kleine stappen. Gebruik korte zinnen en herkenbare voorbeelden uit het dagelijks leven.",
	"havo": "Leg de nadruk op toepassen: laat de leerling theorie gebruiken in realistische contexten en examenachtige opgaven.",
	"vwo": "Daag de leerling uit met abstractie en redeneren. Vraag naar verklaringen, afleidingen en verbanden tussen onderwerpen.",
}

PASSING_NOTE = "Een score van {passing} of hoger telt als voldoende."


class PromptBuilder:
	def system_instruction(self, subject: Subject, profile: UserProfile) -> str:
		exam_focus = ""
		if profile.is_exam_year:
			exam_focus = "Dit is een eindexamenjaar: focus op de stof van het centraal eindexamen (CSE) en schoolexamen (SE).\n"
		return (
			f"{SYSTEM_INSTRUCTION_BASE}\n"
			"BELANGRIJKE CONTEXT OVER DE LEERLING:\n"
			f"- Naam: {profile.name}\n"
			f"- Niveau: {profile.level.upper()}\n"
			f"- Leerjaar: {profile.year}\n"
			f"- Vak: {subject.name}\n\n"
			f"Pas al je antwoorden, uitleg, moeilijkheidsgraad en taalgebruik specifiek aan op het curriculum van {profile.level} leerjaar {profile.year} in Nederland.\n"
			f"{exam_focus}"
			f"Didactische aanpak voor dit niveau: {LEVEL_STRATEGY[profile.level]}\n"
			f"Officiële examendomeinen: {', '.join(subject.exam_domains)}.\n\n"
			f"Specifieke vakinstructie: {subject.prompt_context}"
		)

	def _mode_instruction(self, mode: SessionMode) -> str:
		if mode == SessionMode.EXAM:
			return (
				f"Gebruik uitsluitend echte vragen uit centrale eindexamens van {settings.exam_year_from} t/m {settings.exam_year_to} voor dit niveau. "
				"Neem de vraag zo letterlijk mogelijk over en vermeld in het veld 'source' het examenjaar en tijdvak (bijv. '2019 tijdvak 1'). "
				"Hoort er een tekst of bron bij de vraag, zet die dan in 'attachment'."
			)
		return (
			"Verzin zelf een nieuwe vraag die aansluit bij het officiële Nederlandse curriculum voor dit niveau en jaar. "
			"Laat het veld 'source' leeg."
		)

	def start_prompt(self, subject: Subject, profile: UserProfile, topics: str, mode: SessionMode) -> str:
		if topics:
			user_topic = f'Focus uitsluitend op de volgende onderwerpen: "{topics}".'
		else:
			user_topic = "Kies zelf een belangrijk onderwerp uit het examenprogramma."
		return (
			f"Start een oefensessie voor {profile.level} leerjaar {profile.year} voor het vak {subject.name}.\n"
			f"{user_topic}\n"
			"Genereer de eerste vraag. Het moet een open vraag zijn. Laat 'feedback' leeg (null).\n"
			f"{self._mode_instruction(mode)}\n"
			"Begin met een vraag van gemiddeld niveau en geef altijd een korte hint mee."
		)

	def answer_prompt(self, answer: str, profile: UserProfile, mode: SessionMode) -> str:
		return (
			f"Mijn antwoord is: {answer}\n"
			f"Beoordeel dit streng maar rechtvaardig op {profile.level} niveau met een score van 0 tot 10. "
			f"{PASSING_NOTE.format(passing=settings.passing_score)} "
			"Geef feedback en daarna de volgende vraag. Herhaal geen eerdere vragen en pas de moeilijkheid aan op hoe het gaat.\n"
			f"{self._mode_instruction(mode)}"
		)

	def summary_prompt(self, score: SessionScore) -> str:
		return (
			f"De oefensessie is afgelopen. De leerling had {score.correct} van de {score.total} vragen voldoende. "
			"Geef een korte, bemoedigende samenvatting in Markdown. Noem wat goed ging en welke onderwerpen nog aandacht verdienen, "
			"en sluit af met één concreet advies om verder te oefenen. Stel geen nieuwe vraag."
		)

	def topics_prompt(self, subject: Subject, profile: UserProfile) -> str:
		return (
			f"Geef een lijst van {settings.topic_min} tot {settings.topic_max} concrete examenonderwerpen of hoofdstukken "
			f"voor het vak {subject.name} voor {profile.level} leerjaar {profile.year} in Nederland.\n"
			f"Kies ze binnen deze examendomeinen: {', '.join(subject.exam_domains)}.\n"
			"Houd de onderwerpen kort (max 3-4 woorden)."
		)

	def flashcard_prompt(self, subject: Subject, profile: UserProfile, topics: str, count: int) -> str:
		user_topic = f'over het onderwerp: "{topics}"' if topics else "over de belangrijkste lesstof voor dit jaar"
		return (
			f"Genereer een set van {count} flashcards voor {profile.level} leerjaar {profile.year} voor het vak {subject.name} {user_topic}.\n"
			"Zorg dat de begrippen en moeilijkheid aansluiten bij het niveau."
		)
