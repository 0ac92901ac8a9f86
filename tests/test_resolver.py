"""Tests for hook discovery, target resolution and listing."""

import json

import pytest

from githooks.core.config_store import ConfigScope, KEY_TRUST_ALL, MemoryConfigStore
from githooks.core.formatters import ConsoleFormatter, FormatterFactory, JSONFormatter
from githooks.core.ignore import IgnoreFilter
from githooks.core.ledger import ChecksumLedger
from githooks.core.models import HookSource, HookState, SharedRepo
from githooks.core.resolver import HookNotFoundError, HookResolver
from githooks.core.status import HookStatusService, TriggerListing
from githooks.core.trust import TrustEvaluator

from conftest import write_hook


@pytest.fixture
def resolver(repo):
    return HookResolver(repo)


# =============================================================================
# Discovery
# =============================================================================

def test_hooks_in_directory_are_sorted_and_skip_dotfiles(repo, resolver):
    root = repo / ".githooks" / "pre-commit"
    for name in ("b", "a", ".ignore", "c"):
        write_hook(root / name)

    group = resolver.local_hooks("pre-commit")

    assert [h.name for h in group.files] == ["a", "b", "c"]
    assert not group.single_file


def test_single_file_trigger(repo, resolver):
    write_hook(repo / ".githooks" / "pre-push")

    group = resolver.local_hooks("pre-push")

    assert group.single_file
    assert group.files[0].path == (repo / ".githooks" / "pre-push").absolute()


def test_missing_trigger_has_no_group(resolver):
    assert resolver.local_hooks("post-checkout") is None


def test_legacy_hook_requires_executable_bit(repo, resolver):
    hooks = repo / ".git" / "hooks"
    write_hook(hooks / "pre-commit.replaced.githook", executable=False)
    assert resolver.legacy_hook("pre-commit", hooks) is None

    (hooks / "pre-commit.replaced.githook").chmod(0o755)
    legacy = resolver.legacy_hook("pre-commit", hooks)
    assert legacy.source == HookSource.LEGACY


def test_shared_root_prefers_nested_githooks(tmp_path):
    flat = tmp_path / "flat"
    flat.mkdir()
    nested = tmp_path / "nested"
    (nested / ".githooks").mkdir(parents=True)

    assert HookResolver.shared_root(flat) == flat
    assert HookResolver.shared_root(nested) == nested / ".githooks"


def test_shared_hooks_skip_unsynced_repositories(tmp_path, resolver):
    cache = tmp_path / "cache"
    write_hook(cache / "b" / "pre-commit" / "check")
    repos = [SharedRepo(url="https://x/a.git", name="a"), SharedRepo(url="https://x/b.git", name="b")]

    groups = resolver.shared_hooks(repos, cache, "pre-commit")

    assert len(groups) == 1
    assert groups[0].files[0].name == "check"
    assert groups[0].source == HookSource.SHARED_GLOBAL


# =============================================================================
# Target resolution
# =============================================================================

def test_no_arguments_targets_whole_hook_root(repo, resolver):
    assert resolver.find_target([]).path == (repo / ".githooks").absolute()


def test_trigger_and_file(repo, resolver):
    hook = write_hook(repo / ".githooks" / "pre-commit" / "lint")

    assert resolver.find_target(["pre-commit", "lint"]).path == hook.absolute()


def test_trigger_directory_is_found_by_name(repo, resolver):
    write_hook(repo / ".githooks" / "pre-commit" / "lint")

    target = resolver.find_target(["pre-commit"])

    assert target.path == (repo / ".githooks" / "pre-commit").absolute()


def test_single_file_under_root_is_preferred(repo, resolver):
    write_hook(repo / ".githooks" / "pre-push")

    assert resolver.find_target(["pre-push"]).path == (repo / ".githooks" / "pre-push").absolute()


def test_name_search_is_lexicographic_and_reports_ambiguity(repo, resolver):
    write_hook(repo / ".githooks" / "pre-push" / "lint")
    write_hook(repo / ".githooks" / "pre-commit" / "lint")

    target = resolver.find_target(["lint"])

    assert target.path == (repo / ".githooks" / "pre-commit" / "lint").absolute()
    assert target.ambiguous
    assert len(target.candidates) == 2


def test_literal_path_relative_to_repository(repo, resolver):
    hook = write_hook(repo / ".githooks" / "pre-commit" / "lint")

    assert resolver.find_target([".githooks/pre-commit/lint"]).path == hook.absolute()


def test_symlinked_hook_keeps_its_path_under_hook_root(repo, resolver):
    write_hook(repo / "scripts" / "lint.sh")
    link = repo / ".githooks" / "pre-commit" / "lint"
    link.parent.mkdir(parents=True, exist_ok=True)
    link.symlink_to("../../scripts/lint.sh")

    target = resolver.find_target([".githooks/pre-commit/lint"])

    assert target.path == link.absolute()
    assert resolver.iter_files(target.path) == [link.absolute()]


def test_paths_outside_hook_root_are_rejected(repo, resolver):
    (repo / "src").mkdir()

    with pytest.raises(HookNotFoundError):
        resolver.find_target(["src"])


def test_unknown_name_raises(resolver):
    with pytest.raises(HookNotFoundError) as exc_info:
        resolver.find_target(["nothing"])

    assert "não foi possível encontrar hooks" in str(exc_info.value)


def test_iter_files_skips_trust_marker_and_dotfiles(repo, resolver):
    root = repo / ".githooks"
    write_hook(root / "pre-commit" / "lint")
    write_hook(root / "pre-push")
    (root / "trust-all").touch()
    (root / ".ignore").write_text("*.md\n")

    files = resolver.iter_files(root.absolute())

    assert files == [
        (root / "pre-commit" / "lint").absolute(),
        (root / "pre-push").absolute(),
    ]


# =============================================================================
# Listing
# =============================================================================

def _service(repo, config=None):
    config = config or MemoryConfigStore()
    hook_root = repo / ".githooks"
    return HookStatusService(
        resolver=HookResolver(repo),
        ignore_filter=IgnoreFilter([hook_root]),
        trust=TrustEvaluator(hook_root / "trust-all", config),
        ledger=ChecksumLedger(repo / ".git" / ".githooks.checksum"),
    )


def test_listing_states_and_order(repo, tmp_path):
    root = repo / ".githooks"
    accepted = write_hook(root / "pre-commit" / "accepted")
    write_hook(root / "pre-commit" / "new")
    write_hook(root / "pre-commit" / "notes.md")
    (root / ".ignore").write_text("*.md\n")
    write_hook(repo / ".git" / "hooks" / "pre-commit.replaced.githook")
    cache = tmp_path / "cache"
    write_hook(cache / "team" / "pre-commit" / "shared")
    service = _service(repo)
    service.ledger.record_accepted(accepted)

    listing = service.list_trigger(
        "pre-commit",
        hook_folder=repo / ".git" / "hooks",
        global_repos=[SharedRepo(url="https://x/team.git", name="team")],
        cache_dir=cache,
    )

    labels = [item.label for item in listing.hooks]
    assert labels == [
        "pre-commit.replaced.githook (previous / file / pending / new)",
        "shared (pending / new / shared:global)",
        "accepted (active)",
        "new (pending / new)",
        "notes.md (ignored)",
    ]


def test_legacy_hook_is_classified_like_other_hooks(repo):
    legacy = write_hook(repo / ".git" / "hooks" / "pre-commit.replaced.githook")
    service = _service(repo)

    listing = service.list_trigger("pre-commit", hook_folder=repo / ".git" / "hooks")
    assert listing.hooks[0].state == HookState.PENDING_NEW

    service.ledger.record_accepted(legacy)
    listing = service.list_trigger("pre-commit", hook_folder=repo / ".git" / "hooks")
    assert listing.hooks[0].state == HookState.ACTIVE

    service.ledger.record_disabled(legacy)
    listing = service.list_trigger("pre-commit", hook_folder=repo / ".git" / "hooks")
    assert listing.hooks[0].state == HookState.DISABLED


def test_listing_trusted_repository(repo):
    config = MemoryConfigStore()
    config.set(KEY_TRUST_ALL, "Y", ConfigScope.LOCAL)
    (repo / ".githooks" / "trust-all").touch()
    write_hook(repo / ".githooks" / "pre-push")

    listing = _service(repo, config).list_trigger("pre-push")

    assert listing.hooks[0].state == HookState.TRUSTED
    assert listing.hooks[0].label == "pre-push (file / active / trusted)"


def test_console_formatter(repo):
    write_hook(repo / ".githooks" / "pre-commit" / "lint")
    service = _service(repo)
    listings = [
        service.list_trigger("pre-commit"),
        TriggerListing(trigger="post-merge"),
        TriggerListing(trigger="pre-push", requested=True),
    ]

    text = ConsoleFormatter().format_listings(listings)

    assert text.splitlines() == [
        "> pre-commit",
        "  - lint (pending / new)",
        "> pre-push",
        "  Nenhum hook ativo encontrado",
    ]


def test_console_formatter_without_hooks():
    assert "Nenhum hook ativo" in ConsoleFormatter().format_listings([TriggerListing(trigger="pre-commit")])


def test_json_formatter(repo):
    write_hook(repo / ".githooks" / "pre-commit" / "lint")
    listing = _service(repo).list_trigger("pre-commit")

    data = json.loads(JSONFormatter(pretty=False).format_listings([listing]))

    assert data[0]["trigger"] == "pre-commit"
    assert data[0]["hooks"][0]["state"] == "pending / new"
    assert data[0]["hooks"][0]["source"] == "local"


def test_formatter_factory():
    assert isinstance(FormatterFactory.create("CONSOLE"), ConsoleFormatter)
    assert isinstance(FormatterFactory.create("json"), JSONFormatter)
    with pytest.raises(ValueError):
        FormatterFactory.create("xml")
