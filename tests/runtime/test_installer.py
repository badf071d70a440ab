"""
Unit tests for runtime archive installation.
"""

import subprocess
from unittest.mock import Mock, patch

import pytest
import responses
from urllib3.exceptions import ProtocolError, ReadTimeoutError

from runtimekit.core.exceptions import ExecutionError, UserError
from runtimekit.core.http import HttpClient
from runtimekit.core.network import NetworkPolicy
from runtimekit.runtime.installer import (
    ArchiveInstaller,
    ShellPipelineExtractor,
    StreamingExtractor,
)
from tests.mocks.network import FakeExtractor, FakeHttpClient
from tests.utils.helpers import go_archive_url

PRIMARY = go_archive_url("1.20.5")
ALTERNATE = go_archive_url("1.20.5", alt=True)


@pytest.fixture
def make_installer(go_runtime, linux_x64):
    def _make(statuses, extractor=None):
        http = FakeHttpClient(statuses=statuses)
        return ArchiveInstaller(go_runtime, http, extractor or FakeExtractor(), linux_x64)

    return _make


class TestSelectArchiveUrl:
    """Test mirror selection."""

    def test_primary_available(self, make_installer):
        """Test the primary mirror is used without probing the alternate."""
        installer = make_installer({PRIMARY: 200})

        assert installer.select_archive_url("1.20.5", NetworkPolicy.DEFAULT) == PRIMARY
        assert installer.http.urls("HEAD") == [PRIMARY]

    def test_fallback_to_alternate(self, make_installer, caplog):
        """Test a missing primary falls back to the alternate mirror."""
        installer = make_installer({PRIMARY: 404, ALTERNATE: 200})

        assert installer.select_archive_url("1.20.5", NetworkPolicy.DEFAULT) == ALTERNATE
        assert installer.http.urls("HEAD") == [PRIMARY, ALTERNATE]
        assert f"does not exist at {PRIMARY} (status 404)" in caplog.text

    def test_alternative_policy_probes_alt_first(self, make_installer):
        """Test the alternative network tries the alternative mirror first."""
        installer = make_installer({ALTERNATE: 200})

        assert (
            installer.select_archive_url("1.20.5", NetworkPolicy.ALTERNATIVE) == ALTERNATE
        )
        assert installer.http.urls("HEAD") == [ALTERNATE]

    def test_both_missing(self, make_installer):
        """Test a version absent from both mirrors is a user error."""
        installer = make_installer({PRIMARY: 404, ALTERNATE: 403})

        with pytest.raises(UserError) as exc_info:
            installer.select_archive_url("1.20.5", NetworkPolicy.DEFAULT)

        assert str(exc_info.value) == (
            f"Runtime version 1.20.5 does not exist at {ALTERNATE} (status 403). "
            "You can specify the version with RUNTIMEKIT_RUNTIME_VERSION."
        )

    def test_unreachable_mirror(self, make_installer):
        """Test an unreachable mirror reports status 0."""
        installer = make_installer({PRIMARY: 404, ALTERNATE: 0})

        with pytest.raises(UserError, match=r"\(status 0\)"):
            installer.select_archive_url("1.20.5", NetworkPolicy.DEFAULT)


class TestInstall:
    """Test ArchiveInstaller.install."""

    def test_extracts_then_records_version(self, make_installer, go_layer):
        """Test the version is recorded after a successful extraction."""
        extractor = FakeExtractor()
        installer = make_installer({PRIMARY: 200}, extractor)

        url = installer.install(go_layer, "1.20.5", NetworkPolicy.DEFAULT)

        assert url == PRIMARY
        assert extractor.calls == [(PRIMARY, go_layer.path, 1)]
        assert (go_layer.path / "bin" / "go").exists()
        assert go_layer.get_metadata("version") == "1.20.5"

    def test_extraction_failure_records_nothing(self, make_installer, go_layer):
        """Test a failed extraction leaves no version behind."""
        installer = make_installer({PRIMARY: 200}, FakeExtractor(fail=True))

        with pytest.raises(ExecutionError):
            installer.install(go_layer, "1.20.5", NetworkPolicy.DEFAULT)

        assert go_layer.get_metadata("version") == ""
        assert not go_layer.metadata_file.exists()

    def test_missing_version_never_extracts(self, make_installer, go_layer):
        """Test nothing is downloaded when no mirror has the archive."""
        extractor = FakeExtractor()
        installer = make_installer({}, extractor)

        with pytest.raises(UserError):
            installer.install(go_layer, "9.99", NetworkPolicy.DEFAULT)

        assert extractor.calls == []
        assert go_layer.is_empty()


class TestShellPipelineExtractor:
    """Test the curl | tar extractor."""

    def test_build_command(self, go_layer):
        """Test the pipeline streams, retries and strips one component."""
        cmd = ShellPipelineExtractor(retries=3).build_command(PRIMARY, go_layer)

        assert cmd[:2] == ["bash", "-c"]
        pipeline = cmd[2]
        assert pipeline.startswith("set -o pipefail; ")
        assert "curl --fail --show-error --silent --location --retry 3" in pipeline
        assert PRIMARY in pipeline
        assert f"tar xz --directory {go_layer.path}" in pipeline
        assert pipeline.endswith("--strip-components=1")

    def test_quotes_paths(self, tmp_path):
        """Test paths with spaces are quoted."""
        layer = Mock()
        layer.path = tmp_path / "my layers" / "go"

        cmd = ShellPipelineExtractor().build_command(PRIMARY, layer)

        assert f"--directory '{layer.path}'" in cmd[2]

    @patch("runtimekit.runtime.installer.subprocess.run")
    def test_extract_success(self, mock_run, go_layer):
        """Test a zero exit status is success."""
        mock_run.return_value = subprocess.CompletedProcess([], 0, "", "")

        ShellPipelineExtractor().extract(PRIMARY, go_layer)

        args, kwargs = mock_run.call_args
        assert args[0][0] == "bash"
        assert kwargs["capture_output"] is True

    @patch("runtimekit.runtime.installer.subprocess.run")
    def test_extract_failure(self, mock_run, go_layer):
        """Test a non-zero exit raises with the command and stderr."""
        mock_run.return_value = subprocess.CompletedProcess(
            [], 22, "", "curl: (22) The requested URL returned error: 404\n"
        )

        with pytest.raises(ExecutionError) as exc_info:
            ShellPipelineExtractor().extract(PRIMARY, go_layer)

        message = str(exc_info.value)
        assert "exit code 22" in message
        assert "returned error: 404" in message
        assert "Command: set -o pipefail;" in message

    @patch("runtimekit.runtime.installer.subprocess.run", side_effect=FileNotFoundError("bash"))
    def test_shell_missing(self, mock_run, go_layer):
        """Test a missing shell raises ExecutionError."""
        with pytest.raises(ExecutionError, match="Failed to execute bash"):
            ShellPipelineExtractor().extract(PRIMARY, go_layer)


class TestStreamingExtractor:
    """Test the requests + tarfile extractor."""

    @responses.activate
    def test_extracts_into_layer(self, go_layer, go_archive):
        """Test the archive is streamed into the layer with one component stripped."""
        responses.add(responses.GET, PRIMARY, body=go_archive, status=200)
        http = HttpClient(retries=0)

        StreamingExtractor(http).extract(PRIMARY, go_layer)

        assert (go_layer.path / "bin" / "go").exists()
        assert (go_layer.path / "VERSION").read_text() == "go1.20.5\n"

    @responses.activate
    def test_download_failure(self, go_layer):
        """Test HTTP errors become ExecutionError."""
        responses.add(responses.GET, PRIMARY, status=404)

        with pytest.raises(ExecutionError, match="Downloading"):
            StreamingExtractor(HttpClient(retries=0)).extract(PRIMARY, go_layer)

    @responses.activate
    def test_corrupt_archive(self, go_layer):
        """Test a body that is not a tarball becomes ExecutionError."""
        responses.add(responses.GET, PRIMARY, body=b"<html>not found</html>", status=200)

        with pytest.raises(ExecutionError, match="Failed to extract"):
            StreamingExtractor(HttpClient(retries=0)).extract(PRIMARY, go_layer)

    @pytest.mark.parametrize(
        "error",
        [
            ProtocolError("Connection broken: IncompleteRead(0 bytes read)"),
            ReadTimeoutError(None, PRIMARY, "Read timed out."),
        ],
    )
    def test_connection_lost_mid_stream(self, go_layer, error):
        """Test a dropped connection during extraction becomes ExecutionError."""
        response = Mock()
        response.raw.read.side_effect = error
        http = Mock()
        http.open_stream.return_value = response

        with pytest.raises(ExecutionError, match=f"Downloading {PRIMARY} failed"):
            StreamingExtractor(http).extract(PRIMARY, go_layer)

        response.close.assert_called_once()
