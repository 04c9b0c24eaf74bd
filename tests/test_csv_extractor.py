"""Tests for the delimited text extractor."""

import pytest

from wrapped.etl.extractors.csv_extractor import CSVExtractor


@pytest.fixture
def extractor():
    return CSVExtractor()


def test_simple_rows(extractor):
    rows = extractor.parse("a,b,c\n1,2,3\n")

    assert rows == [["a", "b", "c"], ["1", "2", "3"]]


def test_fields_are_trimmed(extractor):
    rows = extractor.parse("  a , b\n 1,2  \n")

    assert rows == [["a", "b"], ["1", "2"]]


def test_quoted_field_with_delimiter(extractor):
    rows = extractor.parse('id,name\n1,"Ride, with friends"\n')

    assert rows[1] == ["1", "Ride, with friends"]


def test_quoted_field_with_newlines(extractor):
    content = 'id,description\n1,"First line\nSecond line\r\nThird"\n2,plain\n'

    rows = extractor.parse(content)

    assert len(rows) == 3
    assert rows[1] == ["1", "First line\nSecond line\r\nThird"]
    assert rows[2] == ["2", "plain"]


def test_doubled_quote_escape(extractor):
    rows = extractor.parse('id,name\n1,"The ""Big"" Loop"\n')

    assert rows[1] == ["1", 'The "Big" Loop']


def test_crlf_is_one_terminator(extractor):
    rows = extractor.parse("a,b\r\n1,2\r\n3,4")

    assert rows == [["a", "b"], ["1", "2"], ["3", "4"]]


def test_empty_rows_dropped(extractor):
    rows = extractor.parse("a,b\n\n , \n1,2\n,,\n")

    assert rows == [["a", "b"], ["1", "2"]]


def test_last_row_without_newline(extractor):
    rows = extractor.parse("a,b\n1,2")

    assert rows[-1] == ["1", "2"]


def test_trailing_empty_field_kept(extractor):
    rows = extractor.parse("a,b,c\n1,,\n")

    assert rows[1] == ["1", "", ""]


def test_empty_input(extractor):
    assert extractor.parse("") == []


def test_custom_delimiter():
    extractor = CSVExtractor(delimiter=";")

    rows = extractor.parse('a;b\n"1;5";2\n')

    assert rows[1] == ["1;5", "2"]


def test_parse_bytes_strips_bom(extractor):
    rows = extractor.parse_bytes("\ufeffActivity ID,Name\n1,Run\n".encode("utf-8"))

    assert rows[0][0] == "Activity ID"


def test_parse_header_record(extractor):
    record = extractor.parse_header_record("First Name,Last Name,City\nJane,Doe\n")

    assert record == {"First Name": "Jane", "Last Name": "Doe", "City": ""}


def test_parse_header_record_without_data_row(extractor):
    assert extractor.parse_header_record("First Name,Last Name\n") is None
