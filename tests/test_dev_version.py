import pytest

from scripts.dev_version import dev_version, main, read_version, rewrite_version

SHA = "3f2a9c81d0e4b7aa"


def test_dev_version_uses_short_sha():
    assert dev_version("1.2.0", SHA) == "1.2.0.dev0+3f2a9c81"


@pytest.mark.parametrize("current", ["1.2.0", "1.2.0.rc1", "1.2.0.a3", "1.2.0.post2"])
def test_rewrite_version_drops_prerelease_suffix(current):
    text = f'"""Package."""\n\n__version__ = "{current}"\n'

    rewritten = rewrite_version(text, SHA)

    assert read_version(rewritten) == "1.2.0.dev0+3f2a9c81"
    assert rewritten.startswith('"""Package."""\n\n')


def test_rewrite_version_keeps_quote_style():
    assert rewrite_version("__version__='0.9'", SHA) == "__version__ = '0.9.dev0+3f2a9c81'"


def test_rewrite_version_without_assignment_raises():
    with pytest.raises(ValueError, match=r"No __version__"):
        rewrite_version("VERSION = '1.0'", SHA)


def test_rewrite_version_requires_sha():
    with pytest.raises(ValueError):
        rewrite_version("__version__ = '1.0'", "")


def test_main_rewrites_file_in_place(tmp_path, capsys):
    init_file = tmp_path / "__init__.py"
    init_file.write_text('"""Package."""\n\n__version__ = "2.0.0.rc2"\n', encoding="utf-8")

    main([SHA, "--file", str(init_file)])

    assert init_file.read_text(encoding="utf-8") == '"""Package."""\n\n__version__ = "2.0.0.dev0+3f2a9c81"\n'
    assert capsys.readouterr().out.strip() == "2.0.0.dev0+3f2a9c81"


def test_main_exits_when_file_has_no_version(tmp_path, capsys):
    init_file = tmp_path / "__init__.py"
    init_file.write_text("VERSION = '1.0'\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main([SHA, "--file", str(init_file)])

    assert exc_info.value.code == 1
    assert "No __version__" in capsys.readouterr().err
    assert init_file.read_text(encoding="utf-8") == "VERSION = '1.0'\n"
