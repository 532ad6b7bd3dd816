"""Prompt construction for speech-therapy report generation.

The patient profile is rendered in TOON (Token-Oriented Object Notation):
indented ``key: value`` lines with inline primitive arrays, which is
compact and reads naturally for the model. Identity fields (first and last
name) are never part of the prompt; they are applied afterwards by the
post-processing step.
"""

from typing import Any

from toon_format import encode

from tokensa.llm.base import Message, MessageRole
from tokensa.models.intake import GenerationRequest

SYSTEM_PROMPT = (
    "Tu es un orthophoniste expérimenté. Rédige des textes courts, clairs et "
    "professionnels pour les bilans ou exercices."
)

TASK_NAME = "Synthèse orthophonique"
SEPARATOR = "--------------------------------"

EXAMPLE_REPORT = [
    "[EXEMPLE]Lors des épreuves de lecture, l'enfant présente des itérations fréquentes,",
    "traduisant des reprises successives de mots ou de segments, ainsi que des ",
    "additions de lettres ou de syllabes. On observe également une segmentation ",
    "inadéquate, suggérant une difficulté à structurer correctement la chaîne écrite.",
    " La fluence de lecture est ralentie, avec une lenteur excessive qui impacte la ",
    "fluidité générale et la compréhension implicite.",
    "En production écrite, les analyses révèlent des substitutions phonologiques,",
    "témoignant d'une fragilité persistante dans le traitement phonémique. L'enfant",
    "produit également des erreurs liées aux lettres muettes, ainsi qu'une confusion",
    "dans l'usage des homophones grammaticaux. L'écriture manuscrite ",
    "se caractérise par une irrégularité de la taille et de l'espacement des lettres,",
    "associée à une dysgraphie, affectant la lisibilité et la stabilité du tracé.[EXEMPLE FIN]",
]


def profile_data(request: GenerationRequest) -> dict[str, Any]:
    """Structured profile handed to the model."""
    context: dict[str, Any] = {
        "task": TASK_NAME,
        "patientAge": request.display_age,
    }
    if request.niveau:
        context["niveau"] = request.niveau
    if request.homme is not None:
        context["sexe"] = "masculin" if request.homme else "féminin"
    return {"context": context, "tags": [tag.value for tag in request.tags]}


def encode_profile(request: GenerationRequest) -> str:
    return encode(profile_data(request))


def build_prompt(request: GenerationRequest) -> str:
    """User prompt: instruction, example report, then the patient profile."""
    return "\n".join(
        [
            "Ton rôle en tant qu'orthophoniste est de rédiger un rapport en francais comme ceci :",
            *EXAMPLE_REPORT,
            SEPARATOR,
            "Maintenant, voici le profil du patient :",
            encode_profile(request),
            SEPARATOR,
            "Soit professionnel dans ta réponse et bienveillant.",
        ]
    )


def build_messages(request: GenerationRequest) -> list[Message]:
    return [
        Message(role=MessageRole.SYSTEM, content=SYSTEM_PROMPT),
        Message(role=MessageRole.USER, content=build_prompt(request)),
    ]
