"""Response schemas handed to Gemini for structured (JSON) calls."""

QUESTION_SCHEMA = {
    "type": "OBJECT",
    "description": "De volgende oefenvraag.",
    "properties": {
        "text": {"type": "STRING", "description": "De vraag zelf. Gebruik Markdown en LaTeX voor formules."},
        "topic": {"type": "STRING", "description": "Het specifieke onderwerp (bijv. differentiëren)."},
        "difficulty": {"type": "STRING", "enum": ["makkelijk", "gemiddeld", "moeilijk"]},
        "source": {"type": "STRING", "nullable": True, "description": "Bron van de vraag, bijv. 'CE 2019 tijdvak 1'."},
        "hint": {"type": "STRING", "description": "Een korte hint die de leerling op weg helpt zonder het antwoord te verklappen."},
        "attachment": {
            "type": "OBJECT",
            "nullable": True,
            "description": "Optionele bijlage zoals een tekstfragment waar de vraag over gaat.",
            "properties": {
                "type": {"type": "STRING", "enum": ["text", "image"]},
                "title": {"type": "STRING", "nullable": True},
                "content": {"type": "STRING"},
            },
            "required": ["type", "content"],
        },
    },
    "required": ["text", "topic", "difficulty", "hint"],
}

FEEDBACK_SCHEMA = {
    "type": "OBJECT",
    "nullable": True,
    "description": "Feedback op het vorige antwoord. Null bij de start van de sessie.",
    "properties": {
        "isCorrect": {"type": "BOOLEAN", "description": "Of het antwoord grotendeels goed was."},
        "score": {"type": "INTEGER", "description": "Score van 0 tot 10."},
        "explanation": {"type": "STRING", "description": "Uitleg waarom het goed of fout is, inclusief tips."},
        "modelAnswer": {"type": "STRING", "description": "Het ideale antwoord of de uitwerking."},
    },
    "required": ["isCorrect", "score", "explanation", "modelAnswer"],
}

PRACTICE_TURN_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "feedback": FEEDBACK_SCHEMA,
        "nextQuestion": QUESTION_SCHEMA,
    },
    "required": ["nextQuestion"],
}

FLASHCARD_SET_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "topic": {"type": "STRING", "description": "Het onderwerp van deze set kaarten."},
        "cards": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "front": {"type": "STRING", "description": "De term, vraag of concept op de voorkant."},
                    "back": {"type": "STRING", "description": "De definitie, antwoord of uitleg op de achterkant."},
                    "category": {"type": "STRING", "description": "Categorie (bijv. 'Definitie', 'Formule', 'Jaartal')."},
                },
                "required": ["front", "back", "category"],
            },
        },
    },
    "required": ["topic", "cards"],
}

TOPIC_LIST_SCHEMA = {
    "type": "ARRAY",
    "items": {"type": "STRING"},
}
