"""Tests for model output clean-up."""

import pytest

from tokensa.models.intake import GenerationRequest
from tokensa.models.tags import SymptomTag
from tokensa.report.postprocess import (
    ThinkingFilter,
    extract_json_object,
    extract_report_text,
    normalize_whitespace,
    personalize,
    postprocess,
    strip_thinking,
)


class TestStripThinking:
    """Tests for reasoning block removal."""

    def test_complete_block(self):
        assert strip_thinking("<think>raisonnement</think>Le rapport.") == "Le rapport."

    def test_multiple_blocks(self):
        text = "<think>a</think>Début <think>b\nc</think>fin"

        assert strip_thinking(text) == "Début fin"

    def test_unterminated_block_dropped(self):
        """An unclosed block swallows the rest of the text."""
        assert strip_thinking("Rapport.<think>coupé") == "Rapport."

    def test_no_block(self):
        assert strip_thinking("Texte simple") == "Texte simple"


class TestExtractJson:
    """Tests for JSON unwrapping."""

    def test_object_in_prose(self):
        text = 'Voici le rapport : {"text": "Bonjour"} merci'

        assert extract_json_object(text) == {"text": "Bonjour"}

    def test_braces_inside_strings(self):
        """Braces in string values do not end the object."""
        text = '{"text": "accolade } et { dans le texte", "n": 1}'

        assert extract_json_object(text) == {"text": "accolade } et { dans le texte", "n": 1}

    def test_escaped_quotes(self):
        text = '{"text": "il a dit \\"non\\" }"}'

        assert extract_json_object(text) == {"text": 'il a dit "non" }'}

    def test_skips_invalid_candidate(self):
        """A brace that does not open valid JSON is skipped."""
        text = '{pas du json} puis {"rapport": "ok"}'

        assert extract_json_object(text) == {"rapport": "ok"}

    def test_no_object(self):
        assert extract_json_object("aucune accolade") is None

    @pytest.mark.parametrize("key", ["text", "rapport", "report", "synthese", "content"])
    def test_report_keys(self, key):
        assert extract_report_text(f'{{"{key}": "Synthèse"}}') == "Synthèse"

    def test_unknown_keys_keep_raw_text(self):
        raw = '{"autre": "valeur"}'

        assert extract_report_text(raw) == raw

    def test_plain_text_unchanged(self):
        assert extract_report_text("Rapport en clair.") == "Rapport en clair."


class TestPersonalize:
    """Tests for first-name and gender substitution."""

    def test_first_name_replaces_generic_references(self):
        text = "L'enfant lit lentement. Le patient confond les sons."

        assert personalize(text, prenom="Hugo") == "Hugo lit lentement. Hugo confond les sons."

    def test_contractions_with_first_name(self):
        text = "La lecture du patient est hachée, on propose au patient des exercices."

        assert personalize(text, prenom="Hugo") == (
            "La lecture de Hugo est hachée, on propose à Hugo des exercices."
        )

    def test_capitalized_contraction(self):
        assert personalize("Au patient, on conseille...", prenom="Hugo") == "À Hugo, on conseille..."

    def test_elision_before_vowel(self):
        """'de' and 'que' elide before a name starting with a vowel."""
        text = "Les progrès du patient montrent que l'enfant progresse."

        assert personalize(text, prenom="Emma") == (
            "Les progrès d'Emma montrent qu'Emma progresse."
        )

    def test_elision_after_lorsque_and_puisque(self):
        text = "Lorsque l'enfant lit, puisque l'enfant hésite, que l'enfant relit."

        assert personalize(text, prenom="Emma") == (
            "Lorsqu'Emma lit, puisqu'Emma hésite, qu'Emma relit."
        )

    def test_no_elision_before_consonant(self):
        assert personalize("Lorsque l'enfant lit.", prenom="Hugo") == "Lorsque Hugo lit."

    def test_feminine_patient_reference(self):
        assert personalize("La patiente lit.", prenom="Léa") == "Léa lit."

    def test_name_is_inserted_literally(self):
        """Backslashes in a name are not read as regex escapes."""
        assert personalize("Le patient lit.", prenom="A\\1") == "A\\1 lit."

    def test_feminize_without_name(self):
        text = "Le patient lit. Les erreurs du patient sont proposées au patient."

        assert personalize(text, homme=False) == (
            "La patiente lit. Les erreurs de la patiente sont proposées à la patiente."
        )

    def test_masculinize_without_name(self):
        text = "La patiente lit. Les erreurs de la patiente sont proposées à la patiente."

        assert personalize(text, homme=True) == (
            "Le patient lit. Les erreurs du patient sont proposées au patient."
        )

    def test_unknown_gender_without_name(self):
        text = "Le patient lit."

        assert personalize(text) == text


class TestNormalize:
    """Tests for whitespace normalization and the full chain."""

    def test_collapses_spaces_and_blank_lines(self):
        text = "  Ligne  un \n\n\n\n  Ligne\tdeux  "

        assert normalize_whitespace(text) == "Ligne un\n\nLigne deux"

    def test_full_chain(self):
        request = GenerationRequest(
            age=8,
            prenom="Hugo",
            tags=[SymptomTag.LECTURE_FLUENCE_HACHEE],
        )
        raw = '<think>je réfléchis</think>\n{"text": "L\'enfant  lit de façon hachée."}'

        assert postprocess(raw, request) == "Hugo lit de façon hachée."


class TestThinkingFilter:
    """Tests for the streaming reasoning filter."""

    def _run(self, fragments):
        think_filter = ThinkingFilter()
        out = [think_filter.feed(f) for f in fragments]
        out.append(think_filter.flush())
        return "".join(out)

    def test_passthrough(self):
        assert self._run(["Bonjour ", "le monde"]) == "Bonjour le monde"

    def test_block_in_single_fragment(self):
        assert self._run(["<think>caché</think>Visible"]) == "Visible"

    def test_tags_split_across_fragments(self):
        fragments = ["<th", "ink>pensée", " longue</thi", "nk>\n\nLe rap", "port."]

        assert self._run(fragments) == "Le rapport."

    def test_leading_whitespace_dropped(self):
        assert self._run(["\n\n  ", "Texte"]) == "Texte"

    def test_inner_whitespace_kept(self):
        assert self._run(["Un", " ", "deux"]) == "Un deux"

    def test_partial_open_tag_released_when_not_a_tag(self):
        """A held-back '<th' is emitted once it turns out not to be a tag."""
        assert self._run(["a <th", "é chaud"]) == "a <thé chaud"

    def test_unclosed_block_dropped_on_flush(self):
        assert self._run(["Début", "<think>jamais fermé"]) == "Début"

    def test_pending_prefix_flushed(self):
        assert self._run(["fin <"]) == "fin <"
