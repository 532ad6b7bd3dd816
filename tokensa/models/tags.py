"""Closed vocabulary of speech-therapy symptom tags."""

from enum import Enum


class Domain(str, Enum):
    """Assessment domain a tag belongs to."""

    LECTURE = "Lecture"
    ECRITURE = "Écriture"


class SymptomTag(str, Enum):
    """Observed difficulty, as '<Domain> - <Category> <Observation>'."""

    # Lecture - Décodage
    LECTURE_DECODAGE_CONFUSIONS = "Lecture - Décodage Confusions grapho-phonémiques"
    LECTURE_DECODAGE_CONVERSION = "Lecture - Décodage Conversion graphème-phonème incorrecte"
    LECTURE_DECODAGE_ITERATIONS = "Lecture - Décodage Itérations"
    LECTURE_DECODAGE_OMISSIONS = "Lecture - Décodage Omissions (lettres, syllabes)"
    LECTURE_DECODAGE_ADDITIONS = "Lecture - Décodage Additions"
    LECTURE_DECODAGE_INVERSIONS = "Lecture - Décodage Inversions"
    LECTURE_DECODAGE_SEGMENTATION = "Lecture - Décodage Segmentation inadéquate"
    LECTURE_DECODAGE_FUSIONS = "Lecture - Décodage Fusions indue"
    LECTURE_DECODAGE_REGULARISATIONS = "Lecture - Décodage Régularisations"

    # Lecture - Lexicale
    LECTURE_LEXICALE_PARALEXIES_VERBALES = "Lecture - Lexicale Paralexies verbales"
    LECTURE_LEXICALE_PARALEXIES_SEMANTIQUES = "Lecture - Lexicale Paralexies sémantiques"
    LECTURE_LEXICALE_LEXICALISATIONS = "Lecture - Lexicale Lexicalisations"
    LECTURE_LEXICALE_PARALEXIES_VISUELLES = "Lecture - Lexicale Paralexies visuelles"

    # Lecture - Phonologique
    LECTURE_PHONOLOGIQUE_OMISSION = "Lecture - Phonologique Omission (phonèmes)"
    LECTURE_PHONOLOGIQUE_AJOUT = "Lecture - Phonologique Ajout (phonèmes)"
    LECTURE_PHONOLOGIQUE_SUBSTITUTION = "Lecture - Phonologique Substitution (voisement, articulation)"
    LECTURE_PHONOLOGIQUE_INVERSION = "Lecture - Phonologique Inversion séquentielle"

    # Lecture - Fluence
    LECTURE_FLUENCE_HACHEE = "Lecture - Fluence Lecture hachée"
    LECTURE_FLUENCE_LENTEUR = "Lecture - Fluence Lenteur excessive"
    LECTURE_FLUENCE_PROSODIE = "Lecture - Fluence Erreurs prosodiques"

    # Lecture - Compréhension
    LECTURE_COMPREHENSION_LITTERALES = "Lecture - Compréhension Erreurs littérales"
    LECTURE_COMPREHENSION_INFERENTIELLES = "Lecture - Compréhension Erreurs inférentielles"
    LECTURE_COMPREHENSION_ANAPHORES = "Lecture - Compréhension Confusion des anaphores"
    LECTURE_COMPREHENSION_INCOHERENTES = "Lecture - Compréhension Interprétations incohérentes"

    # Écriture - Phonologique
    ECRITURE_PHONOLOGIQUE_OMISSIONS = "Écriture - Phonologique Omissions de phonèmes"
    ECRITURE_PHONOLOGIQUE_ADDITIONS = "Écriture - Phonologique Additions de phonèmes"
    ECRITURE_PHONOLOGIQUE_SUBSTITUTIONS = "Écriture - Phonologique Substitutions phonologiques"
    ECRITURE_PHONOLOGIQUE_INVERSIONS = "Écriture - Phonologique Inversions"
    ECRITURE_PHONOLOGIQUE_SEGMENTATION = "Écriture - Phonologique Segmentation fautive"

    # Écriture - Lexicale
    ECRITURE_LEXICALE_USAGE = "Écriture - Lexicale Erreurs d'usage"
    ECRITURE_LEXICALE_HOMOPHONES = "Écriture - Lexicale Confusion homophones lexicaux"
    ECRITURE_LEXICALE_LETTRES_MUETTES = "Écriture - Lexicale Erreurs lettres muettes"
    ECRITURE_LEXICALE_DERIVATIONNELS = "Écriture - Lexicale Erreurs morphèmes dérivationnels"

    # Écriture - Grammaire
    ECRITURE_GRAMMAIRE_ACCORDS_NOM_ADJECTIF = "Écriture - Grammaire Accords nom-adjectif"
    ECRITURE_GRAMMAIRE_ACCORDS_SUJET_VERBE = "Écriture - Grammaire Accords sujet-verbe"
    ECRITURE_GRAMMAIRE_CONJUGAISON = "Écriture - Grammaire Erreurs de conjugaison"
    ECRITURE_GRAMMAIRE_HOMOPHONES = "Écriture - Grammaire Confusion homophones grammaticaux"

    # Écriture - Morphosyntaxe
    ECRITURE_MORPHOSYNTAXE_OMISSIONS = "Écriture - Morphosyntaxe Omissions de mots grammaticaux"
    ECRITURE_MORPHOSYNTAXE_ORDRE = "Écriture - Morphosyntaxe Ordre des mots incorrect"
    ECRITURE_MORPHOSYNTAXE_AGRAMMATICALES = "Écriture - Morphosyntaxe Structures agrammaticales"

    # Écriture - Graphomotricité
    ECRITURE_GRAPHOMOTRICITE_FORMES = "Écriture - Graphomotricité Formes de lettres incorrectes"
    ECRITURE_GRAPHOMOTRICITE_TAILLE = "Écriture - Graphomotricité Taille et espacement irréguliers"
    ECRITURE_GRAPHOMOTRICITE_LENTEUR = "Écriture - Graphomotricité Lenteur d'écriture"
    ECRITURE_GRAPHOMOTRICITE_DYSGRAPHIE = "Écriture - Graphomotricité Dysgraphie"

    # Écriture - Texte
    ECRITURE_TEXTE_COHERENCE = "Écriture - Texte Manque de cohérence"
    ECRITURE_TEXTE_PONCTUATION = "Écriture - Texte Ponctuation insuffisante"
    ECRITURE_TEXTE_CONNECTEURS = "Écriture - Texte Absence de connecteurs"
    ECRITURE_TEXTE_REPETITIONS = "Écriture - Texte Répétitions / ruptures discursives"

    @property
    def domain(self) -> Domain:
        return Domain(self.value.split(" - ", 1)[0])

    @property
    def category(self) -> str:
        """Sub-domain, e.g. 'Décodage' or 'Graphomotricité'."""
        return self.value.split(" - ", 1)[1].split(" ", 1)[0]

    @property
    def observation(self) -> str:
        return self.value.split(" - ", 1)[1].split(" ", 1)[1]


def tags_by_domain() -> dict[str, dict[str, list[str]]]:
    """Group the vocabulary as {domain: {category: [tag values]}}, in declaration order."""
    grouped: dict[str, dict[str, list[str]]] = {}
    for tag in SymptomTag:
        grouped.setdefault(tag.domain.value, {}).setdefault(tag.category, []).append(tag.value)
    return grouped
