import io

import pytest

import csv_tidy.cli as cli
from csv_tidy.errors import ProcessingError


@pytest.fixture
def messy(tmp_path):
    path = tmp_path / "people.csv"
    path.write_bytes(b"name,city\r\nAda,London\r\nAda,London\r\nGrace,\r\n")
    return path


def test_writes_to_stdout(messy, capsys):
    assert cli.main([str(messy)]) == cli.EXIT_OK
    assert capsys.readouterr().out == "name,city\nAda,London"


def test_reads_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("a,b\n1,2\n1,2\n"))
    assert cli.main([]) == cli.EXIT_OK
    assert capsys.readouterr().out == "a,b\n1,2"


def test_output_file(messy, tmp_path):
    out = tmp_path / "out.csv"
    assert cli.main([str(messy), "-o", str(out)]) == cli.EXIT_OK
    assert out.read_text(encoding="utf-8") == "name,city\nAda,London"


def test_save_beside_input(messy, tmp_path):
    assert cli.main([str(messy), "--save"]) == cli.EXIT_OK
    assert (tmp_path / "cleaned_people.csv").read_text(encoding="utf-8") == "name,city\nAda,London"


def test_save_needs_a_path(capsys):
    assert cli.main(["--save"]) == cli.EXIT_USAGE
    assert "--save needs an input file path" in capsys.readouterr().err


def test_missing_input(tmp_path, capsys):
    assert cli.main([str(tmp_path / "nope.csv")]) == cli.EXIT_READ
    assert "failed to read" in capsys.readouterr().err


def test_empty_after_parse(tmp_path, capsys):
    path = tmp_path / "header.csv"
    path.write_text("a,b\n", encoding="utf-8")
    assert cli.main([str(path)]) == cli.EXIT_EMPTY_AFTER_PARSE
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "no valid data after initial parsing" in captured.err


def test_empty_after_clean(tmp_path, capsys):
    path = tmp_path / "holes.csv"
    path.write_text("a,b\n1,\n,2\n", encoding="utf-8")
    assert cli.main([str(path)]) == cli.EXIT_EMPTY_AFTER_CLEAN
    assert "No valid data remaining after cleaning." in capsys.readouterr().err


def test_write_failure(messy, tmp_path, capsys):
    assert cli.main([str(messy), "-o", str(tmp_path)]) == cli.EXIT_WRITE
    assert "failed to write" in capsys.readouterr().err


def test_processing_error(messy, monkeypatch, capsys):
    def boom(raw, options):
        raise ProcessingError("error processing CSV: bad state")

    monkeypatch.setattr(cli, "tidy_text", boom)
    assert cli.main([str(messy)]) == cli.EXIT_PROCESSING
    assert "bad state" in capsys.readouterr().err


def test_malformed_lines_warn_unless_quiet(tmp_path, capsys):
    path = tmp_path / "bad.csv"
    path.write_text("a,b\n1,2\n3\n", encoding="utf-8")

    assert cli.main([str(path)]) == cli.EXIT_OK
    assert "malformed line 3" in capsys.readouterr().err

    assert cli.main([str(path), "-q"]) == cli.EXIT_OK
    assert capsys.readouterr().err == ""


def test_single_quotes_flag(tmp_path, capsys):
    path = tmp_path / "sq.csv"
    path.write_text("a,b\n'x,y',z\n", encoding="utf-8")
    assert cli.main([str(path), "--single-quotes"]) == cli.EXIT_OK
    assert capsys.readouterr().out == "a,b\n\"'x,y'\",z"


def test_keep_doubled_quotes_flag(tmp_path, capsys):
    path = tmp_path / "dq.csv"
    path.write_text('a\n"say ""hi"""\n', encoding="utf-8")
    assert cli.main([str(path), "--keep-doubled-quotes"]) == cli.EXIT_OK
    assert capsys.readouterr().out == 'a\n"say """"hi"""""'


def test_byte_order_mark_is_dropped(tmp_path, capsys):
    path = tmp_path / "excel.csv"
    path.write_bytes(b'\xef\xbb\xbf"name",city\r\nAda,London\r\n')
    assert cli.main([str(path)]) == cli.EXIT_OK
    assert capsys.readouterr().out == "name,city\nAda,London"


def test_byte_order_mark_is_dropped_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO('\ufeff"name",city\nAda,London\n'))
    assert cli.main([]) == cli.EXIT_OK
    assert capsys.readouterr().out == "name,city\nAda,London"


def test_other_encodings_are_honoured(tmp_path):
    src = tmp_path / "latin.csv"
    src.write_bytes("name,city\nJosé,Bogotá\n".encode("latin-1"))
    out = tmp_path / "out.csv"
    assert cli.main([str(src), "--encoding", "latin-1", "-o", str(out)]) == cli.EXIT_OK
    assert out.read_bytes() == "name,city\nJosé,Bogotá".encode("latin-1")


def test_unknown_encoding_is_a_read_failure(messy, capsys):
    assert cli.main([str(messy), "--encoding", "no-such-codec"]) == cli.EXIT_READ
    assert "failed to read" in capsys.readouterr().err
