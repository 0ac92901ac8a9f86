"""
GITHOOKS - Command Line Interface
Entry point principal para todos os comandos do GITHOOKS (`git hooks <cmd>`).
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from .__version__ import __version__
from .core.config_store import ConfigScope, GitConfigStore, KEY_DISABLE
from .core.context import RepositoryContext, build_context
from .core.formatters import FormatterFactory, emit
from .core.ledger import LedgerWriteError
from .core.resolver import HookNotFoundError, ResolvedTarget
from .core.settings_loader import SettingsLoadError, load_settings
from .git.client import GitClient, GitError, find_hooks_dir
from .hooks.install import HookInstaller, InstallError, InstallOptions, print_install_summary, write_readme
from .log import setup_logging
from .prompts.decisions import create_decision_provider
from .update.checker import UpdateFetchError


# =============================================================================
# Typer App Setup
# =============================================================================

app = typer.Typer(
    name="githooks",
    help="🪝 GITHOOKS - Git hooks por repositório, compartilhados e versionados",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console(highlight=False)

ARGS_HELP = "Argumentos do comando (use `help` no final para ver a ajuda)"


# =============================================================================
# Helpers
# =============================================================================

def _fail(message: str, code: int = 1):
    emit(console, f"! {message}")
    raise typer.Exit(code)


def _help_requested(ctx: typer.Context, args: Optional[List[str]]) -> None:
    """`git hooks <cmd> ... help` mostra a ajuda do comando e sai com 0."""
    if args and args[-1] == "help":
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def _context() -> RepositoryContext:
    try:
        return build_context(console=console)
    except GitError as e:
        _fail(str(e))
    except SettingsLoadError as e:
        _fail(f"Erro ao carregar configuração: {e}")


def _resolve(context: RepositoryContext, args: List[str]) -> ResolvedTarget:
    try:
        target = context.resolver.find_target(args)
    except HookNotFoundError as e:
        _fail(str(e))

    if target.ambiguous:
        emit(console, f"! Mais de um hook corresponde a `{' '.join(args)}`, usando {target.path}")
    return target


# =============================================================================
# Global Options
# =============================================================================

def version_callback(value: bool):
    """Callback para --version."""
    if value:
        emit(console, f"Githooks versão {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Mostra versão do GITHOOKS"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Logs de diagnóstico (o mesmo que GITHOOKS_DEBUG=1)"
    ),
):
    """
    🪝 GITHOOKS - Git hooks por repositório, compartilhados e versionados

    Executa os hooks da pasta .githooks e de repositórios compartilhados,
    pedindo confirmação para arquivos novos ou alterados.
    """
    setup_logging(verbose or None)


# =============================================================================
# Command: disable / enable / accept
# =============================================================================

@app.command()
def disable(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help=ARGS_HELP),
    all_hooks: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Desativa todos os hooks atuais e futuros do repositório"
    ),
    reset: bool = typer.Option(
        False,
        "--reset",
        "-r",
        help="Desfaz o --all"
    ),
):
    """
    🚫 Desativa um hook (ou todos) no repositório atual

    Exemplos:

    \b
    git hooks disable pre-commit lint
    git hooks disable --all
    git hooks disable --reset
    """
    _help_requested(ctx, args)
    context = _context()

    if all_hooks:
        if not context.config.set(KEY_DISABLE, "y", ConfigScope.LOCAL):
            _fail("Falha ao desativar os hooks no repositório atual")
        emit(console, "Todos os hooks atuais e futuros estão desativados no repositório atual")
        return

    if reset:
        if context.config.get(KEY_DISABLE, ConfigScope.LOCAL) is not None and \
                not context.config.unset(KEY_DISABLE, ConfigScope.LOCAL):
            _fail("Falha ao reativar os hooks do Githooks")
        emit(console, "Os hooks do Githooks não estão mais desativados")
        return

    target = _resolve(context, args or [])
    ledger = context.ledger
    try:
        for hook_file in context.resolver.iter_files(target.path):
            if ledger.is_disabled(hook_file):
                emit(console, f"O hook já está desativado em {hook_file}")
                continue
            ledger.record_disabled(hook_file)
            emit(console, f"Hook desativado em {hook_file}")
    except LedgerWriteError as e:
        _fail(str(e))


@app.command()
def enable(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help=ARGS_HELP),
):
    """
    ✅ Reativa hooks desativados

    Exemplos:

    \b
    git hooks enable pre-commit lint
    git hooks enable pre-commit
    """
    _help_requested(ctx, args)
    context = _context()
    target = _resolve(context, args or [])

    try:
        context.ledger.clear_disabled(target.path)
    except LedgerWriteError as e:
        _fail(str(e))
    emit(console, f"Hook(s) ativado(s) em {target.path}")


@app.command()
def accept(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help=ARGS_HELP),
):
    """
    👍 Aceita o conteúdo atual de hooks novos ou alterados

    Exemplos:

    \b
    git hooks accept pre-commit lint
    git hooks accept
    """
    _help_requested(ctx, args)
    context = _context()
    target = _resolve(context, args or [])
    ledger = context.ledger

    try:
        for hook_file in context.resolver.iter_files(target.path):
            if ledger.is_disabled(hook_file):
                emit(console, f"O hook está desativado em {hook_file}")
                continue
            ledger.record_accepted(hook_file)
            emit(console, f"Alterações aceitas para {hook_file}")
    except LedgerWriteError as e:
        _fail(str(e))


# =============================================================================
# Command: trust
# =============================================================================

@app.command()
def trust(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help="revoke | delete | forget"),
):
    """
    🤝 Confia em todos os hooks atuais e futuros do repositório

    Exemplos:

    \b
    git hooks trust
    git hooks trust revoke
    git hooks trust delete
    git hooks trust forget
    """
    _help_requested(ctx, args)
    action = args[0] if args else None
    context = _context()
    evaluator = context.trust

    if action is None:
        if not evaluator.trust():
            _fail("Falha ao marcar o repositório atual como confiável")
        emit(console, "O repositório atual agora é confiável.")
        emit(console, "  Não esqueça de fazer commit e push do marcador de confiança!")

    elif action == "forget":
        forgotten = evaluator.forget()
        if forgotten is None:
            emit(console, "O repositório atual não tem configuração de confiança.")
        elif not forgotten:
            _fail("Falha ao remover a configuração de confiança")
        else:
            emit(console, "O repositório atual não é mais confiável.")

    elif action in ("revoke", "delete"):
        if not evaluator.revoke():
            _fail("Falha ao revogar a configuração de confiança")
        emit(console, "O repositório atual não é mais confiável.")

        if action == "delete":
            evaluator.delete_marker()
            emit(console, "O marcador de confiança foi removido do repositório.")
            emit(console, "  Não esqueça de fazer commit e push da alteração!")

    else:
        emit(console, f"! Subcomando desconhecido: {action}")
        _fail("Execute `git hooks trust help` para ver as opções disponíveis.")


# =============================================================================
# Command: list
# =============================================================================

@app.command("list")
def list_hooks(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help="Triggers a listar (padrão: todos)"),
    format: str = typer.Option(
        "console",
        "--format",
        "-f",
        help="Formato de output: console, json"
    ),
):
    """
    📋 Lista os hooks do repositório e seus estados

    Exemplos:

    \b
    git hooks list
    git hooks list pre-commit
    git hooks list --format json
    """
    _help_requested(ctx, args)

    try:
        formatter = FormatterFactory.create(format)
    except ValueError as e:
        _fail(str(e))

    context = _context()
    status = context.status()
    registry = context.registry
    hook_folder = find_hooks_dir(context.repo_root, create=False)

    triggers = list(args) if args else context.settings.managed_hooks
    listings = []
    for trigger in triggers:
        listing = status.list_trigger(
            trigger,
            hook_folder=hook_folder,
            global_repos=registry.global_repos(),
            local_repos=registry.local_repos(),
            cache_dir=context.settings.paths.shared_cache_path,
        )
        listing.requested = bool(args)
        listings.append(listing)

    emit(console, formatter.format_listings(listings))


# =============================================================================
# Command: shared / pull
# =============================================================================

def _sync_all(context: RepositoryContext) -> None:
    repos = context.registry.all_repos()
    if not repos:
        emit(console, "* Nenhum repositório compartilhado configurado")
        return

    results = context.synchronizer().sync(repos)
    if not all(r.success for r in results):
        raise typer.Exit(1)
    emit(console, "Repositórios compartilhados atualizados")


@app.command()
def shared(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help="add <url> | remove <url> | clear | list | update"),
    local: bool = typer.Option(
        False,
        "--local",
        help="Usa o arquivo .githooks/.shared em vez da configuração global"
    ),
):
    """
    🌐 Gerencia repositórios de hooks compartilhados

    Exemplos:

    \b
    git hooks shared add https://example.com/hooks.git
    git hooks shared add --local https://example.com/hooks.git
    git hooks shared list
    git hooks shared update
    """
    _help_requested(ctx, args)
    args = args or ["list"]
    action = args[0]
    context = _context()
    registry = context.registry

    if action in ("add", "remove"):
        if len(args) < 2:
            _fail(f"Informe a URL: git hooks shared {action} <url>")
        url = args[1]
        if action == "add":
            if registry.add(url, local=local):
                emit(console, f"Repositório compartilhado adicionado: {url}")
            else:
                emit(console, f"O repositório já estava na lista: {url}")
        else:
            if not registry.remove(url, local=local):
                _fail(f"Repositório não encontrado na lista: {url}")
            emit(console, f"Repositório compartilhado removido: {url}")

    elif action == "clear":
        registry.clear(local=local)
        emit(console, "Lista de repositórios compartilhados limpa")

    elif action == "list":
        cache_dir = context.settings.paths.shared_cache_path
        for title, repos in (("globais", registry.global_repos()), ("locais", registry.local_repos())):
            emit(console, f"Repositórios compartilhados {title}:")
            if not repos:
                emit(console, "  - nenhum")
            for repo in repos:
                synced = (repo.cache_path(cache_dir) / ".git").exists()
                state = "sincronizado" if synced else "não sincronizado"
                emit(console, f"  - {repo.url} ({state})")

    elif action in ("update", "pull"):
        _sync_all(context)

    else:
        emit(console, f"! Subcomando desconhecido: {action}")
        _fail("Execute `git hooks shared help` para ver as opções disponíveis.")


@app.command()
def pull(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help=ARGS_HELP),
):
    """
    ⬇️ Atualiza (clone/pull) os repositórios compartilhados
    """
    _help_requested(ctx, args)
    _sync_all(_context())


# =============================================================================
# Command: update
# =============================================================================

@app.command()
def update(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help="force | enable | disable"),
):
    """
    🔄 Verifica atualizações do Githooks

    Exemplos:

    \b
    git hooks update
    git hooks update force
    git hooks update enable
    git hooks update disable
    """
    _help_requested(ctx, args)
    action = args[0] if args else None
    context = _context()
    checker = context.update_checker()

    if action == "enable":
        if not checker.enable():
            _fail("Falha ao ativar as atualizações automáticas")
        emit(console, "As verificações automáticas de atualização foram ativadas")
        return

    if action == "disable":
        if not checker.disable():
            _fail("Falha ao desativar as atualizações automáticas")
        emit(console, "As verificações automáticas de atualização foram desativadas")
        return

    if action not in (None, "force"):
        emit(console, f"! Subcomando desconhecido: {action}")
        _fail("Execute `git hooks update help` para ver as opções disponíveis.")

    try:
        result = checker.run_manual(force=action == "force")
    except UpdateFetchError as e:
        _fail(f"Falha ao buscar o script de atualização: {e}")

    if (result.available or action == "force") and not result.installed:
        raise typer.Exit(1)


# =============================================================================
# Command: readme
# =============================================================================

@app.command()
def readme(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help="add | update"),
):
    """
    📖 Adiciona o README do Githooks em .githooks/README.md
    """
    _help_requested(ctx, args)
    action = args[0] if args else "add"
    if action not in ("add", "update"):
        emit(console, f"! Subcomando desconhecido: {action}")
        _fail("Execute `git hooks readme help` para ver as opções disponíveis.")

    context = _context()
    try:
        written = write_readme(context.repo_root, context.settings.paths.hooks_dir, replace=action == "update")
    except OSError as e:
        _fail(f"Falha ao atualizar o README no repositório atual: {e}")

    if not written:
        emit(console, "! Este repositório já parece ter um README do Githooks.")
        emit(console, "  Para substituí-lo pela versão mais recente, execute `git hooks readme update`")
        raise typer.Exit(1)

    emit(console, "O README foi atualizado, não esqueça de fazer commit e push!")


# =============================================================================
# Command: version / help
# =============================================================================

@app.command()
def version(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help=ARGS_HELP),
):
    """
    🏷️ Mostra a versão instalada
    """
    _help_requested(ctx, args)
    emit(console, f"Versão: {__version__}")


@app.command("help")
def help_command(ctx: typer.Context):
    """
    ❓ Mostra a ajuda geral
    """
    typer.echo(ctx.parent.get_help())


# =============================================================================
# Command: run (chamado pelos templates instalados)
# =============================================================================

@app.command(
    "run",
    hidden=True,
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_hook(
    ctx: typer.Context,
    hook_path: Path = typer.Argument(..., help="Caminho do hook chamado pelo git"),
):
    """
    Executa os hooks de um trigger (usado por .git/hooks/<trigger>).
    """
    context = _context()
    try:
        result = context.engine().process(hook_path, ctx.args)
    except LedgerWriteError as e:
        _fail(str(e))
    raise typer.Exit(result.exit_code)


# =============================================================================
# Command: install
# =============================================================================

@app.command()
def install(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Mostra o que seria feito, sem alterar nada"
    ),
    non_interactive: bool = typer.Option(
        False,
        "--non-interactive",
        help="Não faz perguntas (usa as respostas padrão)"
    ),
    single: bool = typer.Option(
        False,
        "--single",
        help="Instala apenas no repositório atual (sem templates)"
    ),
    search_dir: Optional[Path] = typer.Option(
        None,
        "--search-dir",
        help="Onde procurar repositórios existentes (padrão: última busca ou HOME)"
    ),
):
    """
    🪝 Instala o Githooks

    Exemplos:

    \b
    # Templates + repositórios existentes
    githooks install

    \b
    # Apenas o repositório atual
    githooks install --single

    \b
    # Simulação
    githooks install --dry-run --non-interactive
    """
    try:
        settings = load_settings()
    except SettingsLoadError as e:
        _fail(f"Erro ao carregar configuração: {e}")

    options = InstallOptions(
        dry_run=dry_run,
        non_interactive=non_interactive,
        single=single,
        search_dir=search_dir,
    )
    decider = create_decision_provider(
        settings.prompts,
        console,
        interactive=False if non_interactive else None,
    )
    installer = HookInstaller(
        settings,
        GitConfigStore(GitClient(), Path.cwd()),
        decider=decider,
        console=console,
    )

    try:
        report = installer.install(options)
    except (InstallError, GitError) as e:
        _fail(str(e))

    print_install_summary(report, console)
    if not report.success:
        raise typer.Exit(1)


# =============================================================================
# Main Entry Point
# =============================================================================

def main():
    """Entry point principal."""
    app()


if __name__ == "__main__":
    main()
