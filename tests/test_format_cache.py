"""Tests for the precompiled format cache."""


def test_builds_missing_format_once(make_session, fake_tex):
    cache = make_session().format_cache

    assert not cache.is_fresh()
    assert cache.ensure_format() is True
    assert cache.is_fresh()
    assert cache.ensure_format() is False
    assert fake_tex.kinds == ["precompile"]


def test_existing_format_is_reused(make_session, fake_tex, tmp_path):
    (tmp_path / "doc.fmt").write_bytes(b"old format")
    cache = make_session().format_cache

    assert cache.ensure_format() is False
    assert fake_tex.calls == []
    assert cache.last_outcome is None


def test_forced_rebuild_happens_once(make_session, fake_tex, tmp_path):
    (tmp_path / "doc.fmt").write_bytes(b"old format")
    cache = make_session(precompile=True).format_cache

    assert cache.ensure_format() is True
    assert cache.ensure_format() is False
    assert fake_tex.kinds == ["precompile"]


def test_explicit_force(make_session, fake_tex):
    cache = make_session().format_cache
    cache.ensure_format()

    assert cache.ensure_format(force=True) is True
    assert fake_tex.kinds == ["precompile", "precompile"]


def test_failed_build_is_not_fresh(make_session, fake_tex, tmp_path):
    (tmp_path / "doc.fmt").write_bytes(b"old format")
    fake_tex.failing.add("precompile")
    cache = make_session(precompile=True).format_cache

    assert cache.ensure_format() is False
    assert not cache.last_outcome.succeeded
    assert not cache.is_fresh()


def test_deleted_format_is_rebuilt(make_session, fake_tex, tmp_path):
    cache = make_session().format_cache
    cache.ensure_format()

    (tmp_path / "doc.fmt").unlink()

    assert cache.ensure_format() is True
    assert fake_tex.kinds == ["precompile", "precompile"]


def test_full_document_mode_never_builds(make_session, fake_tex):
    cache = make_session(skip_fmt=True).format_cache

    assert cache.ensure_format() is False
    assert cache.ensure_format(force=True) is False
    assert fake_tex.calls == []


def test_format_in_temp_folder(make_session, tmp_path):
    cache = make_session(temp_folder="build").format_cache

    cache.ensure_format()

    assert cache.format_path == tmp_path / "build" / "doc.fmt"
    assert cache.format_path.is_file()
