"""
sigtrust CLI

Diagnostic commands over the trust root store and SCT verifier:
- roots: List the resolved root and intermediate certificates
- verify-sct: Verify the SCTs of a certificate
- contains-sct: Report whether a certificate embeds SCTs
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from rich import box
from rich.console import Console
from rich.table import Table

from sigtrust.ct.verify import SCTVerifier, contains_sct
from sigtrust.exceptions import SigTrustError
from sigtrust.roots.store import TrustRootStore

console = Console()


def _output_json(data: object) -> None:
    """Print data as JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


def _describe(cert: x509.Certificate) -> dict:
    return {
        "subject": cert.subject.rfc4514_string(),
        "issuer": cert.issuer.rfc4514_string(),
        "sha256": cert.fingerprint(hashes.SHA256()).hex(),
        "not_after": cert.not_valid_after_utc.strftime("%Y-%m-%d %H:%M:%S"),
    }


def _read(path: str) -> bytes:
    return Path(path).read_bytes()


def _fail(exc: SigTrustError) -> None:
    console.print(f"[bold red]{type(exc).__name__}[/bold red]: {exc}")
    raise SystemExit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def app(verbose: bool):
    """Inspect trust roots and verify certificate transparency SCTs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
@click.option("--json", "json_flag", is_flag=True, help="Output as JSON.")
@click.option("--timeout", type=float, default=None, help="Trust lookup deadline in seconds.")
def roots(json_flag: bool, timeout: Optional[float]):
    """List the root and intermediate certificates in use."""
    try:
        pools = TrustRootStore().pools(timeout)
    except SigTrustError as exc:
        _fail(exc)
        return

    if json_flag:
        _output_json({
            "roots": [_describe(c) for c in pools.roots],
            "intermediates": [_describe(c) for c in pools.intermediates],
        })
        return

    table = Table(box=box.ROUNDED)
    table.add_column("Pool", style="cyan")
    table.add_column("Subject")
    table.add_column("Issuer")
    table.add_column("SHA-256", style="dim", no_wrap=True)
    for label, pool in (("root", pools.roots), ("intermediate", pools.intermediates)):
        for cert in pool:
            info = _describe(cert)
            table.add_row(label, info["subject"], info["issuer"], info["sha256"][:16])
    console.print(table)
    console.print(
        f"\n  Roots: {len(pools.roots)}  Intermediates: {len(pools.intermediates)}\n"
    )


@app.command("verify-sct")
@click.argument("cert", type=click.Path(exists=True, dir_okay=False))
@click.argument("chain", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--sct", "sct_path", type=click.Path(exists=True, dir_okay=False), default=None,
    help="Detached SCT (add-chain response JSON).",
)
@click.option("--json", "json_flag", is_flag=True, help="Output as JSON.")
@click.option("--timeout", type=float, default=None, help="Trust lookup deadline in seconds.")
def verify_sct_command(
    cert: str, chain: str, sct_path: Optional[str], json_flag: bool, timeout: Optional[float]
):
    """Verify the SCTs of CERT issued by the first certificate of CHAIN."""
    raw_sct = _read(sct_path) if sct_path else b""
    try:
        result = SCTVerifier().verify_sct(_read(cert), _read(chain), raw_sct, timeout=timeout)
    except SigTrustError as exc:
        if json_flag:
            _output_json({"verified": False, "error": type(exc).__name__, "message": str(exc)})
            raise SystemExit(1)
        _fail(exc)
        return

    if json_flag:
        data = result.model_dump(mode="json")
        data["count"] = data.pop("verified")
        _output_json({"verified": True, **data})
        return

    console.print(
        f"[green]✓[/green] Verified {result.verified} {result.mode.value} SCT(s)"
    )
    for advisory in result.advisories:
        console.print(f"[yellow]![/yellow] {advisory.message}")


@app.command("contains-sct")
@click.argument("cert", type=click.Path(exists=True, dir_okay=False))
def contains_sct_command(cert: str):
    """Report whether CERT (PEM or DER) embeds SCTs."""
    try:
        found = contains_sct(_read(cert))
    except SigTrustError as exc:
        _fail(exc)
        return
    click.echo("true" if found else "false")


if __name__ == "__main__":
    app()
