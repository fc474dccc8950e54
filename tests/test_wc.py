import io

from xvkit.wc import Counts, count, main


def test_count_simple():
    data = b"hello world\nfoo\n"
    assert count(io.BytesIO(data)) == Counts(2, 3, len(data))


def test_nul_separates_words():
    assert count(io.BytesIO(b"a\0b")).words == count(io.BytesIO(b"a b")).words


def test_word_across_chunk_boundary():
    data = b"x" * 1000
    result = count(io.BytesIO(data))
    assert result.words == 1
    assert result.chars == len(data)
    assert result.lines == 0


def test_empty_input():
    assert count(io.BytesIO(b"")) == Counts(0, 0, 0)


def test_main_file(tmp_path, capsys):
    path = tmp_path / "f"
    data = b"a b\tc\r\nd\n"
    path.write_bytes(data)
    expected = count(io.BytesIO(data))
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == (
        f"{expected.lines} {expected.words} {expected.chars} {path}\n"
    )


def test_main_missing(tmp_path, capsys):
    missing = str(tmp_path / "none")
    assert main([missing]) == 1
    assert capsys.readouterr().out == f"wc: cannot open {missing}\n"