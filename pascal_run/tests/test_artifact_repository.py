from __future__ import annotations

from pathlib import Path

from pascal_run.domain.models import Platform, SourceFile
from pascal_run.repositories.artifact_repository import ArtifactRepository


def _touch(path: Path) -> Path:
    path.write_text("x", encoding="utf-8")
    return path


def test_executable_path_per_platform(tmp_path: Path):
    source = SourceFile(tmp_path / "Game.lpr")

    assert ArtifactRepository(Platform.UNIX).executable_path(source) == tmp_path / "Game"
    assert ArtifactRepository(Platform.WINDOWS).executable_path(source) == tmp_path / "Game.exe"


def test_intermediates_derive_from_base_name(tmp_path: Path):
    paths = ArtifactRepository(Platform.UNIX).intermediate_paths(SourceFile(tmp_path / "unit1.pp"))
    assert [p.name for p in paths] == ["unit1.o", "unit1.ppu", "unit1.compiled"]


def test_delete_intermediates_only_touches_matching_files(tmp_path: Path):
    repo = ArtifactRepository(Platform.UNIX)
    source = SourceFile(_touch(tmp_path / "hello.pas"))
    o_file = _touch(tmp_path / "hello.o")
    ppu = _touch(tmp_path / "hello.ppu")
    other = _touch(tmp_path / "world.o")

    deleted = repo.delete_intermediates(source)

    assert sorted(deleted) == sorted([o_file, ppu])
    assert source.path.exists()
    assert other.exists()


def test_cleanup_twice_without_artifacts_is_quiet(tmp_path: Path):
    repo = ArtifactRepository(Platform.UNIX)
    source = SourceFile(_touch(tmp_path / "hello.pas"))
    before = sorted(p.name for p in tmp_path.iterdir())

    assert repo.delete_intermediates(source) == []
    assert repo.delete_intermediates(source) == []
    assert sorted(p.name for p in tmp_path.iterdir()) == before


def test_remove_stale_executable(tmp_path: Path):
    exe = _touch(tmp_path / "hello")

    assert ArtifactRepository.remove_stale_executable(exe) is True
    assert not exe.exists()
    # nothing there any more is still success
    assert ArtifactRepository.remove_stale_executable(exe) is True


def test_writable_dir(tmp_path: Path):
    assert ArtifactRepository.is_writable_dir(tmp_path) is True
    assert ArtifactRepository.is_writable_dir(tmp_path / "missing") is False


def test_source_file_extension_is_lower_cased(tmp_path: Path):
    source = SourceFile(tmp_path / "PROG.PAS")
    assert source.extension == ".pas"
    assert source.base_name == "PROG"
