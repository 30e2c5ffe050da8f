import pytest

from prstate.derive.files import (
    ConfigFile,
    categorize_file,
    get_packages_touched,
    other_files_ok,
    tslint_ok,
)
from prstate.model import FileInfo, FileKind


async def _no_contents():
    raise AssertionError("contents should not be fetched")


def _contents(text):
    async def get():
        return text

    return get


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path,kind",
    [
        ("types/foo/index.d.ts", FileKind.definition),
        ("types/foo/v1/index.d.ts", FileKind.definition),
        ("types/foo/foo-tests.ts", FileKind.test),
        ("types/foo/foo-tests.tsx", FileKind.test),
        ("types/foo/README.md", FileKind.markdown),
        ("types/foo/tsconfig.json", FileKind.package_meta),
        ("types/foo/package.json", FileKind.package_meta),
    ],
)
async def test_package_files(path, kind):
    info = await categorize_file(path, _no_contents)
    assert info == FileInfo(path=path, kind=kind, package="foo")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    ["README.md", ".github/workflows/ci.yml", "types/foo", "scripts/lint.ts", "types/"],
)
async def test_non_package_paths_are_infrastructure(path):
    info = await categorize_file(path, _contents('{"extends": "dtslint/dt.json"}'))
    assert info.kind == FileKind.infrastructure
    assert info.package is None


@pytest.mark.asyncio
async def test_tslint_with_recommended_contents():
    info = await categorize_file(
        "types/foo/tslint.json", _contents('{ "extends": "dtslint/dt.json" }')
    )
    assert info.kind == FileKind.package_meta_ok
    assert info.package == "foo"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text",
    [
        '{"extends": "dtslint/dt.json", "rules": {"no-any": false}}',
        '{"extends": "tslint:recommended"}',
        "{not json",
        "",
        None,
    ],
)
async def test_tslint_with_other_contents(text):
    info = await categorize_file("types/foo/tslint.json", _contents(text))
    assert info.kind == FileKind.package_meta


@pytest.mark.asyncio
async def test_other_files_listing():
    info = await categorize_file(
        "types/foo/OTHER_FILES.txt", _contents("lib/a.d.ts\nlib/b.d.ts\n")
    )
    assert info.kind == FileKind.package_meta_ok

    info = await categorize_file("types/foo/OTHER_FILES.txt", _contents("../a.d.ts\n"))
    assert info.kind == FileKind.package_meta


def test_other_files_ok():
    assert other_files_ok("a.d.ts")
    assert other_files_ok("a.d.ts\n\nsub/b.d.ts\n")
    assert not other_files_ok("")
    assert not other_files_ok("sub//b.d.ts")
    assert not other_files_ok("./a.d.ts")
    assert not other_files_ok("sub/../a.d.ts")
    assert not other_files_ok("/a.d.ts")


def test_tslint_ok():
    assert tslint_ok('{"extends":"dtslint/dt.json"}')
    assert not tslint_ok("[]")
    assert not tslint_ok('{"extends": "dtslint/dt.json"')


def test_config_file_from_path():
    assert ConfigFile.from_path("types/foo/tslint.json") == ConfigFile.tslint
    assert ConfigFile.from_path("types/foo/OTHER_FILES.txt") == ConfigFile.other_files
    assert ConfigFile.from_path("types/foo/tsconfig.json") is None


def test_packages_touched_keeps_first_occurrence_order():
    files = [
        FileInfo(path="types/foo/index.d.ts", kind=FileKind.definition, package="foo"),
        FileInfo(path="README.md", kind=FileKind.infrastructure),
        FileInfo(path="types/bar/bar-tests.ts", kind=FileKind.test, package="bar"),
        FileInfo(path="types/foo/foo-tests.ts", kind=FileKind.test, package="foo"),
    ]
    assert get_packages_touched(files) == ["foo", "bar"]
    assert get_packages_touched([]) == []
