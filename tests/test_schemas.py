"""Tests for scope, policy and storage configuration schemas."""

import pytest
from pydantic import ValidationError

from blob_tools.core.exceptions import ConfigError
from blob_tools.schemas import (
    ObjectDescriptor,
    PolicySpec,
    RunMode,
    S3StorageConfig,
    ScopeSpec,
    build_config,
)


class TestScopeSpec:
    """Test scope specification."""

    def test_extensions_normalized(self):
        """Extensions are lower-cased and get a leading dot."""
        scope = ScopeSpec(allowed_extensions=[".JS", "css", " .Html "])
        assert scope.allowed_extensions == frozenset({".js", ".css", ".html"})

    def test_single_extension_string(self):
        """A bare string is treated as one extension."""
        scope = ScopeSpec(allowed_extensions=".svg")
        assert scope.allowed_extensions == frozenset({".svg"})

    def test_defaults(self):
        """Test scope defaults."""
        scope = ScopeSpec(allowed_extensions=[".js"])
        assert scope.subpath_prefix is None
        assert scope.in_place is True
        assert scope.new_extension_suffix == ".gz"

    def test_subpath_slashes_stripped(self):
        """Test subpath normalization."""
        scope = ScopeSpec(allowed_extensions=[".js"], subpath_prefix="/assets/")
        assert scope.subpath_prefix == "assets"

    def test_blank_subpath_means_whole_container(self):
        """A subpath of only slashes selects everything."""
        scope = ScopeSpec(allowed_extensions=[".js"], subpath_prefix="/")
        assert scope.subpath_prefix is None

    def test_empty_extensions_rejected(self):
        """At least one extension is required."""
        with pytest.raises(ValidationError):
            ScopeSpec(allowed_extensions=[])

    def test_sibling_mode_requires_suffix(self):
        """Sibling mode without a suffix would overwrite the original."""
        with pytest.raises(ValidationError):
            ScopeSpec(
                allowed_extensions=[".js"], in_place=False, new_extension_suffix=""
            )

    def test_scope_is_immutable(self):
        """Specs are shared across workers and cannot change."""
        scope = ScopeSpec(allowed_extensions=[".js"])
        with pytest.raises(ValidationError):
            scope.in_place = False


class TestPolicySpec:
    """Test cache policy specification."""

    def test_header_rendering(self):
        """Test Cache-Control rendering."""
        policy = PolicySpec(cache_control_max_age_seconds=3600)
        assert policy.cache_control_header == "public, max-age=3600"

    def test_zero_max_age(self):
        """Test zero max-age is allowed."""
        policy = PolicySpec(cache_control_max_age_seconds=0)
        assert policy.cache_control_header == "public, max-age=0"

    def test_negative_max_age_rejected(self):
        """Test negative max-age is rejected."""
        with pytest.raises(ValidationError):
            PolicySpec(cache_control_max_age_seconds=-1)


class TestBuildConfig:
    """Test conversion of validation failures to ConfigError."""

    def test_valid_values(self):
        """Test valid values build the model."""
        policy = build_config(PolicySpec, cache_control_max_age_seconds=60)
        assert policy.cache_control_max_age_seconds == 60

    def test_invalid_values_raise_config_error(self):
        """Test invalid values raise ConfigError."""
        with pytest.raises(ConfigError, match="Invalid PolicySpec"):
            build_config(PolicySpec, cache_control_max_age_seconds=-5)

    def test_invalid_scope_raises_config_error(self):
        """Test invalid scope raises ConfigError."""
        with pytest.raises(ConfigError, match="Invalid ScopeSpec"):
            build_config(ScopeSpec, allowed_extensions=[])


class TestObjectDescriptor:
    """Test object descriptors."""

    def test_path_includes_container(self):
        """Test container-qualified path."""
        descriptor = ObjectDescriptor(container="site", key="assets/a.js")
        assert descriptor.path == "/site/assets/a.js"

    def test_run_mode_default(self):
        """Test run mode default."""
        assert RunMode().simulate is False


class TestS3StorageConfig:
    """Test S3 storage configuration."""

    def test_s3_config_defaults(self):
        """Test S3 configuration with defaults."""
        config = S3StorageConfig()
        assert config.type == "s3"
        assert config.access_key_id is None
        assert config.secret_access_key is None
        assert config.session_token is None
        assert config.region_name is None
        assert config.endpoint_url is None
        assert config.aws_profile is None

    def test_s3_config_with_profile(self):
        """Test S3 configuration with AWS profile."""
        config = S3StorageConfig(aws_profile="myprofile")
        assert config.aws_profile == "myprofile"
