import pytest

from addon_publisher.errors import ERR_INVALID_INPUT, InputError
from addon_publisher.inputs import (
    parse_compatibility,
    parse_release_notes,
    require_package_extension,
    require_source_extension,
    resolve_file,
)


class TestResolveFile:
    def test_plain_path(self, tmp_path, monkeypatch):
        (tmp_path / "foo.txt").write_text("")
        monkeypatch.chdir(tmp_path)
        assert resolve_file("foo.txt") == "foo.txt"

    def test_glob(self, tmp_path, monkeypatch):
        (tmp_path / "foo.txt").write_text("")
        monkeypatch.chdir(tmp_path)
        assert resolve_file("*.txt") == "foo.txt"

    def test_does_not_search_subdirectories(self, tmp_path, monkeypatch):
        (tmp_path / "foo").mkdir()
        (tmp_path / "foo" / "bar.txt").write_text("")
        monkeypatch.chdir(tmp_path)
        with pytest.raises(InputError) as excinfo:
            resolve_file("bar.txt")
        assert excinfo.value.code == ERR_INVALID_INPUT

    def test_multiple_matches(self, tmp_path, monkeypatch):
        (tmp_path / "foo.txt").write_text("")
        (tmp_path / "bar.txt").write_text("")
        monkeypatch.chdir(tmp_path)
        with pytest.raises(InputError, match="Multiple files"):
            resolve_file("*.txt")

    def test_directory(self, tmp_path):
        with pytest.raises(InputError, match="Not a regular file"):
            resolve_file(str(tmp_path))


def test_parse_release_notes():
    assert parse_release_notes('{"en": "hi"}') == {"en": "hi"}
    assert parse_release_notes('{"foo": "bar", "de": "hallo"}') == {"foo": "bar", "de": "hallo"}
    assert parse_release_notes("") is None
    assert parse_release_notes(None) is None
    assert parse_release_notes("{}") is None


@pytest.mark.parametrize(
    "text",
    ["42", '"foo"', "false", "true", "null", "[1,2,3]", '{"en": 42}', '{"foo": "bar", "baz": 42}', '{"foo'],
)
def test_parse_release_notes_errors(text):
    with pytest.raises(InputError) as excinfo:
        parse_release_notes(text)
    assert excinfo.value.code == ERR_INVALID_INPUT


def test_parse_compatibility():
    assert parse_compatibility(None) is None
    assert parse_compatibility("") is None
    assert parse_compatibility("[]") is None
    assert parse_compatibility('["firefox", "android"]') == ["firefox", "android"]
    assert parse_compatibility('{"firefox": {"min": "115.0"}, "android": {}}') == {
        "firefox": {"min": "115.0"},
        "android": {},
    }


@pytest.mark.parametrize(
    "text",
    ['"firefox"', "42", "[1, 2]", '{"firefox": "115.0"}', '{"firefox": {"min": 115}}',
     '{"firefox": {"minimum": "1"}}', "{oops"],
)
def test_parse_compatibility_errors(text):
    with pytest.raises(InputError):
        parse_compatibility(text)


@pytest.mark.parametrize("name", ["foo.zip", "foo.xpi", "foo.crx", "FOO.XPI"])
def test_package_extension_ok(name):
    require_package_extension(name)


@pytest.mark.parametrize("name", ["foo", "foo.tar", "foo.tar.gz", "foo.tgz", "foo.tar.bz2", "foo.png"])
def test_package_extension_rejected(name):
    with pytest.raises(InputError):
        require_package_extension(name)


@pytest.mark.parametrize("name", ["foo.zip", "foo.tar.gz", "foo.tgz", "foo.tar.bz2"])
def test_source_extension_ok(name):
    require_source_extension(name)


@pytest.mark.parametrize("name", ["foo", "foo.xpi", "foo.crx", "foo.png"])
def test_source_extension_rejected(name):
    with pytest.raises(InputError):
        require_source_extension(name)
