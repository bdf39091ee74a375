"""Tests for the embedding client."""

import asyncio
from pathlib import Path

import pytest
from deployctl.api import DeployClient, UpdateCheck, WorkloadKind
from deployctl.core.context import ContextField, ContextSnapshot
from deployctl.core.errors import PackageNotFoundError, TransportError
from deployctl.models.product import Product
from deployctl.models.workload import StateKind
from deployctl.workloads import Installer, WorkloadGate
from fakes import FakePlatform, RepositoryBuilder, run_workload


@pytest.fixture
def installed(
    repo: RepositoryBuilder,
    product: Product,
    platform: FakePlatform,
    fresh_env: dict[str, str],
) -> RepositoryBuilder:
    repo.add("core", "1.0", {"bin/core": "core 1.0"})
    repo.add("extras", "1.0", {"extras/readme.txt": "extras"})
    assert run_workload(Installer(product, environ=fresh_env, platform=platform)).ok
    return repo


@pytest.fixture
def client(
    product: Product, platform: FakePlatform, maintenance_env: dict[str, str]
) -> DeployClient:
    return DeployClient(product, platform=platform, environ=maintenance_env)


class TestCheckForUpdates:
    """Tests for DeployClient.check_for_updates."""

    def test_reports_outdated_packages(
        self, installed: RepositoryBuilder, client: DeployClient
    ) -> None:
        installed.add("core", "1.1", {"bin/core": "core 1.1"})
        installed.add("plugins", "1.0", {"plugins/a": "a"})

        check = client.check_for_updates()

        assert isinstance(check, UpdateCheck)
        assert check.has_updates
        by_name = {entry.name: entry for entry in check.packages}
        assert by_name["core"].outdated
        assert by_name["core"].installed_version == "1.0"
        assert by_name["core"].latest_version == "1.1"
        assert not by_name["extras"].outdated
        assert [package.name for package in check.not_installed] == ["plugins"]

    def test_restricted_to_names(self, installed: RepositoryBuilder, client: DeployClient) -> None:
        check = client.check_for_updates(["extras"])
        assert [entry.name for entry in check.packages] == ["extras"]
        assert not check.has_updates

    def test_unknown_name(self, installed: RepositoryBuilder, client: DeployClient) -> None:
        with pytest.raises(PackageNotFoundError):
            client.check_for_updates(["nope"])

    def test_repository_unavailable(
        self, installed: RepositoryBuilder, client: DeployClient
    ) -> None:
        (installed.root / "repository.json").unlink()
        with pytest.raises(TransportError):
            client.check_for_updates()

    def test_to_dict(self, installed: RepositoryBuilder, client: DeployClient) -> None:
        data = client.check_for_updates().to_dict()
        assert data["not_installed"] == []
        assert data["packages"][0] == {
            "name": "core",
            "installed_version": "1.0",
            "latest_version": "1.0",
            "outdated": False,
        }


class TestRunWorkload:
    """Tests for starting workloads through the client."""

    def test_apply_updates_notifies_callback(
        self, installed: RepositoryBuilder, client: DeployClient, target_dir: Path
    ) -> None:
        installed.add("core", "2.0", {"bin/core": "core 2.0"})
        snapshots: list[tuple[ContextSnapshot, ContextField]] = []

        result = client.apply_updates(callback=lambda s, f: snapshots.append((s, f)))

        assert result is not None and result.ok
        assert (target_dir / "bin" / "core").read_text() == "core 2.0"
        states = [s.state.kind for s, f in snapshots if f is ContextField.STATE and s.state]
        assert StateKind.REMOVING_OUTDATED_COMPONENT in states
        assert states[-1] is StateKind.DONE
        final, field = snapshots[-1]
        assert field is ContextField.RESULT
        assert final.is_completed

    def test_remove_packages(
        self, installed: RepositoryBuilder, client: DeployClient, target_dir: Path
    ) -> None:
        result = client.remove_packages(["extras"])

        assert result is not None and result.ok
        assert not (target_dir / "extras").exists()
        assert (target_dir / "bin" / "core").exists()

    def test_install_packages(
        self, installed: RepositoryBuilder, client: DeployClient, target_dir: Path
    ) -> None:
        installed.add("plugins", "1.0", {"plugins/a.txt": "a"}, default=False)

        result = client.install_packages(["plugins"])

        assert result is not None and result.ok
        assert (target_dir / "plugins" / "a.txt").read_text() == "a"

    def test_rejected_while_busy(
        self, installed: RepositoryBuilder, product: Product, platform: FakePlatform
    ) -> None:
        gate = WorkloadGate()
        client = DeployClient(product, platform=platform, gate=gate)
        handle = gate.checkout()
        assert handle is not None

        assert client.busy
        assert asyncio.run(client.run_workload(WorkloadKind.UNINSTALL)) is None

        handle.release()
        assert not client.busy

    def test_gate_released_after_run(
        self, installed: RepositoryBuilder, client: DeployClient
    ) -> None:
        client.remove_packages(["extras"])
        assert not client.busy
        assert client.cancel() is False

    def test_cancel_from_callback(
        self, installed: RepositoryBuilder, client: DeployClient, target_dir: Path
    ) -> None:
        installed.add("core", "2.0", {"bin/core": "core 2.0"})

        def cancel_on_download(snapshot: ContextSnapshot, field: ContextField) -> None:
            state = snapshot.state
            if state is not None and state.kind is StateKind.DOWNLOADING_COMPONENT:
                client.cancel()

        result = client.apply_updates(callback=cancel_on_download)

        assert result is not None
        assert not result.ok
        assert result.error is not None
        assert result.error.name == "workload-aborted"
        assert (target_dir / "bin" / "core").read_text() == "core 1.0"
