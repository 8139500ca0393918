import io

from popsynth.io.records import RecordCursor, normalize_record, split_fields


def test_normalize_strips_comment_tabs_and_line_endings() -> None:
    assert normalize_record("\t1.0,\t0.02  # comment\r\n") == "1.0, 0.02"
    assert normalize_record("# only a comment\n") == ""
    assert normalize_record("   \r\n") == ""


def test_split_fields_trailing_and_embedded_empties() -> None:
    assert split_fields("1,2,") == ["1", "2"]
    assert split_fields("1,,2") == ["1", "", "2"]
    assert split_fields(" 1 , 2 ") == ["1", "2"]
    assert split_fields("") == []


def test_cursor_skips_empty_lines_but_counts_them() -> None:
    cursor = RecordCursor(io.StringIO("# header comment\n\n1.0\n\t\n2.0 # second\n"))
    assert cursor.next_record() == (3, "1.0")
    assert cursor.next_record() == (5, "2.0")
    assert cursor.next_record() is None
    assert cursor.exhausted
    assert cursor.line_no == 6


def test_cursor_restore_rereads_the_same_record() -> None:
    cursor = RecordCursor(io.StringIO("\n5.0\n6.0\n"))
    checkpoint = cursor.checkpoint()
    assert cursor.next_record() == (2, "5.0")
    cursor.restore(checkpoint)
    assert cursor.line_no == 1
    assert cursor.next_record() == (2, "5.0")
    assert cursor.next_record() == (3, "6.0")
