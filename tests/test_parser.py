"""End-to-end tests for parse_document and parse_note_file."""

from pathlib import Path

import pytest

from ctakes_parser.parser import DocumentParseError, parse_document, parse_note_file
from tests.conftest import concept, make_xmi, mention, token


class TestScenarios:
    def test_mention_with_two_concepts_and_tokens(self) -> None:
        xmi = make_xmi(
            mention(begin="10", end="20", polarity="1", concepts="501 502"),
            token(node_id="1", begin="10", end="13", form="no", postag="RB"),
            token(node_id="2", begin="14", end="20", form="pain", postag="NN"),
        )
        result = parse_document(xmi)

        assert [r.concept_id for r in result.records] == [501, 502]
        for record in result.records:
            assert record.negated is False
            assert record.reconstructed_text == "no pain"
            assert record.part_of_speech == "RB"
        assert result.diagnostics == ()

    def test_reference_without_matching_record(self) -> None:
        xmi = make_xmi(
            mention(concepts="600"),
            concept(xmi_id="501", cui="C0000000", tui="T000"),
        )
        result = parse_document(xmi)

        [record] = result.records
        assert record.concept_id == 600
        assert record.cui is None
        assert record.tui is None
        assert record.concept_kind is None
        assert result.diagnostics == ()

    def test_non_integer_begin_yields_diagnostic(self) -> None:
        xmi = make_xmi(mention(xmi_id=55, begin="ten"), mention(xmi_id=56, concepts="7"))
        result = parse_document(xmi)

        assert [r.concept_id for r in result.records] == [7]
        [diagnostic] = result.diagnostics
        assert diagnostic.attribute == "begin"
        assert diagnostic.value == "ten"
        assert diagnostic.element_id == "55"


class TestReferenceJoin:
    @pytest.mark.parametrize("concept_first", [True, False])
    def test_join_holds_in_either_order(self, concept_first: bool) -> None:
        elements = [mention(concepts="501"), concept(xmi_id="501", cui="C0030193", tui="T184", preferredText="Pain")]
        if concept_first:
            elements.reverse()
        [record] = parse_document(make_xmi(*elements)).records

        assert record.concept_kind == "UmlsConcept"
        assert record.cui == "C0030193"
        assert record.tui == "T184"
        assert record.preferred_text == "Pain"
        assert record.coding_scheme == "SNOMEDCT_US"
        assert record.score == 0.0

    def test_concept_shared_by_two_mentions(self) -> None:
        xmi = make_xmi(
            mention(xmi_id=1, begin="0", end="4", concepts="501"),
            mention(xmi_id=2, begin="30", end="34", concepts="501"),
            concept(xmi_id="501", cui="C1"),
        )
        records = parse_document(xmi).records
        assert [r.cui for r in records] == ["C1", "C1"]


class TestSampleNote:
    def test_sample_note(self, sample_note: str) -> None:
        result = parse_document(sample_note)

        assert len(result.tokens) == 4
        assert [t.surface_form for t in result.tokens] == ["Patient", "denies", "chest", "pain"]
        assert [r.concept_id for r in result.records] == [701, 702]

        first, second = result.records
        assert first.negated is True
        assert first.cui == "C0008031"
        assert second.coding_scheme == "LNC"
        for record in result.records:
            assert record.mention_kind == "DiseaseDisorderMention"
            assert record.reconstructed_text == "chest pain"
            assert record.part_of_speech == "NN"
            assert record.subject == "patient"
            assert record.generic is False

    def test_accepts_bytes(self, sample_note: str) -> None:
        assert parse_document(sample_note.encode("utf-8")) == parse_document(sample_note)

    def test_to_frame(self, sample_note: str) -> None:
        frame = parse_document(sample_note).to_frame()
        assert len(frame) == 2
        assert list(frame["true_text"]) == ["chest pain", "chest pain"]


class TestStructuralFailures:
    @pytest.mark.parametrize("content", ["", "   ", "<xmi:XMI", "not xml at all", b"<a><b></a>"])
    def test_malformed_documents_raise(self, content) -> None:
        with pytest.raises(DocumentParseError):
            parse_document(content)

    def test_parse_error_is_value_error(self) -> None:
        assert issubclass(DocumentParseError, ValueError)

    def test_document_with_no_annotations(self) -> None:
        result = parse_document(make_xmi())
        assert result.records == []
        assert result.tokens == ()


class TestParseNoteFile:
    def test_reads_file(self, tmp_path: Path, sample_note: str) -> None:
        path = tmp_path / "note.xmi"
        path.write_text(sample_note, encoding="utf-8")
        assert len(parse_note_file(path).records) == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="No input file"):
            parse_note_file(tmp_path / "absent.xmi")
