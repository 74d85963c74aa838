"""devhosts CLI - Serve local project directories as .test sites."""

import logging
import os
import sys

import click
import questionary
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .errors import DevhostsError
from .manager import SiteManager
from .router import resolve_request

console = Console()

custom_style = questionary.Style([
    ('qmark', 'fg:cyan bold'),
    ('question', 'bold'),
    ('answer', 'fg:cyan bold'),
    ('pointer', 'fg:cyan bold'),
    ('highlighted', 'fg:cyan bold'),
    ('selected', 'fg:cyan'),
])


def sites_table(sites) -> Table:
    table = Table("Site", "SSL", "URL", "Path")
    for site in sites.values():
        table.add_row(site.name, "X" if site.secured else "", site.url, site.path)
    return table


class ManagerGroup(click.Group):
    """Turn DevhostsError into a readable message and exit status 1."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except DevhostsError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            sys.exit(1)


@click.group(cls=ManagerGroup)
@click.version_option(version=__version__, prog_name="devhosts")
@click.option("--verbose", "-v", is_flag=True, help="Show every external command")
@click.pass_context
def main(ctx, verbose):
    """devhosts - Serve local project directories as local HTTPS sites."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    if ctx.obj is None:
        ctx.obj = SiteManager()


@main.command()
@click.argument("path", required=False)
@click.pass_obj
def park(manager, path):
    """Serve every directory inside PATH (default: current directory)."""
    path = os.path.abspath(path or os.getcwd())
    manager.park(path)
    console.print(f"[green]✓[/green] This directory has been added to devhosts' paths: {path}")


@main.command()
@click.argument("path", required=False)
@click.pass_obj
def forget(manager, path):
    """Stop serving the directories inside PATH."""
    path = os.path.abspath(path or os.getcwd())
    manager.forget(path)
    console.print(f"[green]✓[/green] This directory has been removed from devhosts' paths: {path}")


@main.command()
@click.pass_obj
def paths(manager):
    """List the parked roots in lookup order."""
    for path in manager.config.get("paths", []):
        console.print(path)


@main.command()
@click.argument("name", required=False)
@click.pass_obj
def link(manager, name):
    """Link the current directory as NAME."""
    cwd = os.getcwd()
    name = name or os.path.basename(cwd)
    link_path = manager.link(cwd, name)
    console.print(f"[green]✓[/green] A [bold]{name}[/bold] symbolic link has been created in [bold]{link_path}[/bold].")


@main.command()
@click.argument("name", required=False)
@click.pass_obj
def unlink(manager, name):
    """Remove the link NAME (default: the link to the current directory)."""
    name = manager.unlink(name)
    console.print(f"[green]✓[/green] The [bold]{name}[/bold] symbolic link has been removed.")


@main.command()
@click.pass_obj
def links(manager):
    """List linked sites."""
    console.print(sites_table(manager.list_links()))


@main.command()
@click.pass_obj
def parked(manager):
    """List sites served from parked roots."""
    console.print(sites_table(manager.list_parked()))


@main.command("prune-links")
@click.pass_obj
def prune_links(manager):
    """Remove links whose target no longer exists."""
    for name in manager.prune_links():
        console.print(f"[yellow]-[/yellow] {name}")
    console.print("[green]✓[/green] Broken links removed.")


@main.command()
@click.argument("name", required=False)
@click.pass_obj
def secure(manager, name):
    """Serve NAME over HTTPS with a locally signed certificate."""
    url = manager.secure(name)
    console.print(f"[green]✓[/green] The [bold]{url}[/bold] site has been secured with a fresh TLS certificate.")


@main.command()
@click.argument("name", required=False)
@click.option("--all", "all_sites", is_flag=True, help="Unsecure every parked and linked site")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def unsecure(manager, name, all_sites, yes):
    """Serve NAME over plain HTTP again."""
    if not all_sites:
        url = manager.unsecure(name)
        console.print(f"[green]✓[/green] The [bold]{url}[/bold] site will now serve traffic over HTTP.")
        return

    if not yes:
        confirmed = questionary.confirm(
            "Unsecure every parked and linked site?",
            default=False,
            style=custom_style
        ).ask()
        if not confirmed:
            return

    unsecured, remaining = manager.unsecure_all()
    if not unsecured:
        console.print("No sites to unsecure. You may list all servable sites by running [cyan]devhosts parked[/cyan] or [cyan]devhosts links[/cyan].")
        return
    for url in unsecured:
        console.print(f"[green]✓[/green] {url}")
    if remaining:
        console.print("[yellow]We were not successful in unsecuring the following sites:[/yellow]")
        for url in remaining:
            console.print(f"  {url}")
        sys.exit(1)


@main.command()
@click.pass_obj
def secured(manager):
    """List every domain with a certificate."""
    for url in manager.list_secured():
        console.print(url)


@main.command()
@click.argument("name")
@click.argument("upstream")
@click.pass_obj
def proxy(manager, name, upstream):
    """Proxy https://NAME.<domain> to UPSTREAM (e.g. http://127.0.0.1:8080)."""
    url = manager.proxy_create(name, upstream)
    console.print(f"[green]✓[/green] devhosts will now proxy [bold]https://{url}[/bold] traffic to [bold]{upstream}[/bold].")


@main.command()
@click.argument("name")
@click.pass_obj
def unproxy(manager, name):
    """Stop proxying NAME."""
    url = manager.proxy_delete(name)
    console.print(f"[green]✓[/green] devhosts will no longer proxy [bold]https://{url}[/bold].")


@main.command()
@click.pass_obj
def proxies(manager):
    """List proxied sites."""
    console.print(sites_table(manager.list_proxies()))


@main.command()
@click.argument("new_domain", required=False)
@click.pass_obj
def domain(manager, new_domain):
    """Show or change the top-level domain sites are served under."""
    old_domain = manager.domain
    if not new_domain:
        console.print(old_domain)
        return
    new_domain = new_domain.strip(".")
    if new_domain == old_domain:
        console.print(f"Your devhosts domain is already [bold]{new_domain}[/bold].")
        return

    result = manager.rename_domain(old_domain, new_domain)
    for old_url, new_url in result.renamed.items():
        console.print(f"[green]✓[/green] {old_url} -> {new_url}")
    console.print(f"Your devhosts domain has been updated to [bold]{new_domain}[/bold].")
    if result.failed:
        console.print("[yellow]The following sites could not be secured again and are now served over HTTP:[/yellow]")
        for url, error in result.failed.items():
            console.print(f"  {url}: {escape(error)}")
        console.print("Run [cyan]devhosts secure <name>[/cyan] for each of them once the problem is fixed.")
        sys.exit(1)


@main.command()
@click.pass_obj
def regenerate(manager):
    """Rewrite the nginx config of every secured site."""
    for url in manager.regenerate_secured_sites_config():
        console.print(f"[green]✓[/green] {url}")


@main.command()
@click.argument("host")
@click.argument("uri", default="/")
@click.pass_obj
def route(manager, host, uri):
    """Show which file answers a request for HOST and URI."""
    result = resolve_request(manager.config, host, uri)
    console.print(f"[bold]Site:[/bold] {result.site} ({result.site_path})")
    console.print(f"[bold]Driver:[/bold] {result.driver.name}")
    if result.static_file:
        console.print(f"[bold]Static file:[/bold] {result.static_file}")
        return
    console.print(f"[bold]Front controller:[/bold] {result.front_controller.script}")
    if result.front_controller.path_info is not None:
        console.print(f"[bold]PATH_INFO:[/bold] {result.front_controller.path_info}")


if __name__ == "__main__":
    main()
