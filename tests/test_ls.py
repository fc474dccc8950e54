import io

from xvkit.ls import DIRSIZ, FileType, fmtname, ls, main


def test_fmtname_pads_last_component():
    name = fmtname("a/b/name")
    assert name.rstrip() == "name"
    assert len(name) == DIRSIZ


def test_fmtname_long_name_unchanged():
    long_name = "x" * (DIRSIZ + 3)
    assert fmtname("dir/" + long_name) == long_name


def test_ls_file(tmp_path):
    path = tmp_path / "f.txt"
    path.write_bytes(b"abc")
    out, err = io.StringIO(), io.StringIO()
    ls(str(path), out, err)
    text = out.getvalue()
    assert text.startswith(fmtname(str(path)))
    fields = text.split()
    assert fields[-3] == str(int(FileType.FILE))
    assert fields[-1] == "3"
    assert err.getvalue() == ""


def test_ls_directory(tmp_path):
    (tmp_path / "a.txt").write_bytes(b"")
    (tmp_path / "sub").mkdir()
    out, err = io.StringIO(), io.StringIO()
    ls(str(tmp_path), out, err)
    lines = out.getvalue().splitlines()
    assert len(lines) == 4
    assert lines[0].startswith(fmtname("."))
    assert any(line.startswith(fmtname("a.txt")) for line in lines)
    sub_line = next(line for line in lines if line.startswith(fmtname("sub")))
    assert sub_line.split()[1] == str(int(FileType.DIR))


def test_ls_missing(tmp_path):
    missing = str(tmp_path / "none")
    out, err = io.StringIO(), io.StringIO()
    ls(missing, out, err)
    assert err.getvalue() == f"ls: cannot open {missing}\n"
    assert out.getvalue() == ""


def test_ls_path_too_long(tmp_path):
    path = str(tmp_path) + "/." * 300
    out, err = io.StringIO(), io.StringIO()
    ls(path, out, err)
    assert out.getvalue() == "ls: path too long\n"


def test_main_lists_each(tmp_path, capsys):
    first = tmp_path / "one"
    second = tmp_path / "two"
    first.write_bytes(b"")
    second.write_bytes(b"")
    assert main([str(first), str(second)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[0] for line in lines] == ["one", "two"]