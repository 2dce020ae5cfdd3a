"""Tests for scope and already-done classification."""

import pytest

from blob_tools.core.exceptions import ProbeError
from blob_tools.maintenance.eligibility import (
    is_already_done,
    is_in_scope,
    path_extension,
    sibling_key,
)
from blob_tools.schemas import ObjectDescriptor, PipelineKind, ScopeSpec
from conftest import FakeObjectStore


def _obj(key, container="c", **kwargs):
    return ObjectDescriptor(container=container, key=key, **kwargs)


class TestPathExtension:
    """Test extension extraction."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/c/a.js", ".js"),
            ("/c/A.JS", ".js"),
            ("/c/archive.tar.gz", ".gz"),
            ("/c/dir.v2/readme", ""),
            ("/c/noext", ""),
            ("/c/trailing.", ""),
            ("/c/.htaccess", ".htaccess"),
        ],
    )
    def test_extension(self, path, expected):
        """Only the last segment's final dot counts."""
        assert path_extension(path) == expected


class TestIsInScope:
    """Test scope filtering."""

    def test_extension_match_case_insensitive(self):
        """Test extension matching ignores case."""
        scope = ScopeSpec(allowed_extensions=[".js"])
        assert is_in_scope(_obj("lib/App.JS"), scope)

    def test_extension_mismatch(self):
        """Test non-matching extension is out of scope."""
        scope = ScopeSpec(allowed_extensions=[".js"])
        assert not is_in_scope(_obj("b.png"), scope)

    def test_no_extension(self):
        """Test objects without extension are out of scope."""
        scope = ScopeSpec(allowed_extensions=[".js"])
        assert not is_in_scope(_obj("LICENSE"), scope)

    def test_subpath_directory(self):
        """Only objects under the subpath pass."""
        scope = ScopeSpec(allowed_extensions=[".css"], subpath_prefix="assets")
        assert is_in_scope(_obj("assets/x.css"), scope)
        assert is_in_scope(_obj("assets/deep/x.css"), scope)
        assert not is_in_scope(_obj("y.css"), scope)

    def test_subpath_directory_case_insensitive(self):
        """Test directory prefix ignores case."""
        scope = ScopeSpec(allowed_extensions=[".css"], subpath_prefix="assets")
        assert is_in_scope(_obj("Assets/x.css"), scope)

    def test_subpath_is_not_a_string_prefix(self):
        """'assets' must not match 'assets-old/'."""
        scope = ScopeSpec(allowed_extensions=[".css"], subpath_prefix="assets")
        assert not is_in_scope(_obj("assets-old/x.css"), scope)

    def test_subpath_exact_file(self):
        """A subpath naming a single object selects that object."""
        scope = ScopeSpec(allowed_extensions=[".css"], subpath_prefix="assets/x.css")
        assert is_in_scope(_obj("assets/x.css"), scope)
        assert not is_in_scope(_obj("assets/y.css"), scope)

    def test_subpath_is_container_specific(self):
        """The subpath is resolved inside the object's own container."""
        scope = ScopeSpec(allowed_extensions=[".css"], subpath_prefix="assets")
        descriptor = _obj("x.css", container="assets")
        assert not is_in_scope(descriptor, scope)


class TestIsAlreadyDone:
    """Test already-done checks."""

    def test_in_place_gzip_encoded(self):
        """Test gzip-encoded objects are done in place."""
        scope = ScopeSpec(allowed_extensions=[".js"])
        descriptor = _obj("a.js", content_encoding="GZIP")
        assert is_already_done(descriptor, scope, PipelineKind.COMPRESSION)

    def test_in_place_not_encoded(self):
        """Test plain objects are not done."""
        scope = ScopeSpec(allowed_extensions=[".js"])
        assert not is_already_done(_obj("a.js"), scope, PipelineKind.COMPRESSION)

    def test_in_place_other_encoding(self):
        """Test other encodings are not treated as gzip."""
        scope = ScopeSpec(allowed_extensions=[".js"])
        descriptor = _obj("a.js", content_encoding="br")
        assert not is_already_done(descriptor, scope, PipelineKind.COMPRESSION)

    def test_sibling_exists(self):
        """An existing sibling marks the object done."""
        store = FakeObjectStore()
        store.put("c", "a.js.gz", b"")
        scope = ScopeSpec(allowed_extensions=[".js"], in_place=False)

        assert is_already_done(_obj("a.js"), scope, PipelineKind.COMPRESSION, store)
        assert store.calls == [("exists", "a.js.gz")]

    def test_sibling_missing(self):
        """Test missing sibling is not done."""
        store = FakeObjectStore()
        scope = ScopeSpec(allowed_extensions=[".js"], in_place=False)
        assert not is_already_done(
            _obj("a.js"), scope, PipelineKind.COMPRESSION, store
        )

    def test_sibling_ignores_encoding(self):
        """In sibling mode the original's encoding does not matter."""
        store = FakeObjectStore()
        scope = ScopeSpec(allowed_extensions=[".js"], in_place=False)
        descriptor = _obj("a.js", content_encoding="gzip")
        assert not is_already_done(descriptor, scope, PipelineKind.COMPRESSION, store)

    def test_probe_failure(self):
        """Test probe failures raise ProbeError."""
        store = FakeObjectStore()
        store.fail("exists", "a.js.gz")
        scope = ScopeSpec(allowed_extensions=[".js"], in_place=False)

        with pytest.raises(ProbeError) as excinfo:
            is_already_done(_obj("a.js"), scope, PipelineKind.COMPRESSION, store)
        assert excinfo.value.stage == "probe"
        assert excinfo.value.path == "/c/a.js"

    def test_cache_control_never_done(self):
        """Cache headers are always re-applied."""
        scope = ScopeSpec(allowed_extensions=[".js"])
        descriptor = _obj("a.js", cache_control="public, max-age=3600")
        assert not is_already_done(descriptor, scope, PipelineKind.CACHE_CONTROL)

    def test_sibling_key(self):
        """Test sibling key construction."""
        scope = ScopeSpec(
            allowed_extensions=[".js"], in_place=False, new_extension_suffix=".gzip"
        )
        assert sibling_key(_obj("dir/a.js"), scope) == "dir/a.js.gzip"
