#!/usr/bin/env python3
"""
Miracast Discovery CLI

Command-line interface for the Miracast source discovery receiver.

Usage:
    python cli.py lookup p2p-wlan0-0        # One-shot ARP table lookup
    python cli.py watch p2p-wlan0-0         # Poll until a source appears
    python cli.py classify 0x00101c440032   # Decode WFD device info
    python cli.py simulate scenario.json    # Replay events through the receiver
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from config import load_config
from miracast import (
    CallbackListener,
    ConnectionInfo,
    ConnectivityEvent,
    DiscoveredDevice,
    EventDispatcher,
    GroupSnapshot,
    MiracastReceiver,
    StaticP2PManager,
)
from miracast.discovery import AddressResolver, RetryBoundedPoller
from miracast.p2p import WfdParseError, parse_wfd_dev_info, parse_wfd_subelements

console = Console()


def setup_logging(verbose: bool = False, level: str = 'INFO'):
    """Configure logging with rich output."""
    level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)]
    )


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              help='JSON config file')
@click.option('--arp-table', help='ARP table path (default /proc/net/arp)')
@click.pass_context
def cli(ctx, verbose, config_path, arp_table):
    """Miracast source discovery over Wi-Fi Direct."""
    config = load_config(Path(config_path) if config_path else None)
    if arp_table:
        config.arp_table_path = arp_table

    setup_logging(verbose, config.log_level)
    ctx.ensure_object(dict)
    ctx.obj['config'] = config


@cli.command()
@click.argument('interface')
@click.pass_context
def lookup(ctx, interface):
    """Look up the peer address on a P2P interface once."""
    config = ctx.obj['config']
    resolver = AddressResolver(config.arp_table_path)

    async def run():
        try:
            entries = await resolver.entries(interface)
        except OSError as e:
            console.print(f"[red]Cannot read ARP table: {e}[/red]")
            return

        if not entries:
            console.print(f"[yellow]No ARP entries on {interface}[/yellow]")
            return

        table = Table(title=f"ARP Entries ({interface})")
        table.add_column("IP", style="cyan")
        table.add_column("MAC", style="yellow")
        table.add_column("Flags", justify="right")
        table.add_column("Complete")

        for e in entries:
            table.add_row(
                e.ip,
                e.mac,
                hex(e.flags),
                "[green]yes[/green]" if e.is_complete else "[red]no[/red]",
            )
        console.print(table)

        ip = await resolver.lookup(interface)
        if ip:
            console.print(f"\n[green]✓ Peer address: {ip}[/green]")
        else:
            console.print("\n[yellow]No complete entry yet[/yellow]")

    asyncio.run(run())


@cli.command()
@click.argument('interface')
@click.option('--port', '-p', type=int, help='Control port to report')
@click.pass_context
def watch(ctx, interface, port):
    """Poll the ARP table until a source appears on INTERFACE."""
    config = ctx.obj['config']

    async def run():
        poller = RetryBoundedPoller(
            AddressResolver(config.arp_table_path),
            interval=config.poll_interval,
            initial_delay=config.initial_delay,
            max_retries=config.max_retries,
        )
        session = poller.start(interface, port or config.default_control_port)

        with console.status(f"Watching {interface}..."):
            device = await session.result()

        if device:
            print_device(device)
        else:
            console.print(
                f"[red]✗ No source after {session.lookups} lookups[/red]"
            )

    asyncio.run(run())


@cli.command()
@click.argument('value')
@click.option('--subelements', is_flag=True,
              help='VALUE is a full WFD subelement list, not device info')
def classify(value, subelements):
    """Decode Wi-Fi Display device info and show the advertised role."""
    try:
        if subelements:
            info = parse_wfd_subelements(value)
        else:
            info = parse_wfd_dev_info(value)
    except WfdParseError as e:
        console.print(f"[red]Invalid WFD info: {e}[/red]")
        return

    console.print(Panel.fit(
        f"Device type: [cyan]{info.device_type.name}[/cyan]\n"
        f"Source capable: [{'green' if info.is_source else 'red'}]"
        f"{'Yes' if info.is_source else 'No'}[/]\n"
        f"Control port: [yellow]{info.control_port}[/yellow]\n"
        f"Max throughput: [yellow]{info.max_throughput} Mbps[/yellow]\n"
        f"Session available: {'Yes' if info.session_available else 'No'}",
        title="Wi-Fi Display Info"
    ))


@cli.command()
@click.argument('scenario_path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def simulate(ctx, scenario_path):
    """
    Replay a recorded scenario through the receiver.

    The scenario is JSON with "group", "connection" and "events" keys.
    """
    config = ctx.obj['config']

    try:
        with open(scenario_path) as f:
            scenario = json.load(f)
        group = GroupSnapshot.from_dict(scenario['group']) if scenario.get('group') else None
        connection = (
            ConnectionInfo.from_dict(scenario['connection'])
            if scenario.get('connection') else None
        )
        events = [
            ConnectivityEvent.from_dict(e)
            for e in scenario.get('events', [{'kind': 'connection_changed', 'connected': True}])
        ]
    except (json.JSONDecodeError, ValueError, TypeError, AttributeError) as e:
        console.print(f"[red]Invalid scenario: {e}[/red]")
        return

    receiver_config = config.to_receiver_config()
    if scenario.get('arp_table_path'):
        receiver_config.arp_table_path = scenario['arp_table_path']

    async def run() -> List[DiscoveredDevice]:
        added: List[DiscoveredDevice] = []
        listener = CallbackListener(
            lambda ip, port: added.append(DiscoveredDevice(ip, port))
        )
        receiver = MiracastReceiver(StaticP2PManager(group, connection), listener, receiver_config)
        dispatcher = EventDispatcher()

        await receiver.start()
        receiver.register(dispatcher)

        try:
            for event in events:
                dispatcher.dispatch(event)
                # Let the receiver pick up the event before the next one
                await asyncio.sleep(0)
            await receiver.join()
        finally:
            await receiver.stop()

        return added

    added = asyncio.run(run())

    if not added:
        console.print("[yellow]No Miracast source discovered[/yellow]")
        return

    for device in added:
        print_device(device)


def print_device(device: DiscoveredDevice):
    console.print(Panel.fit(
        f"[bold green]Miracast Source Found[/bold green]\n\n"
        f"IP: [cyan]{device.ip_address}[/cyan]\n"
        f"Control Port: [yellow]{device.control_port}[/yellow]",
        title="Device Added"
    ))


if __name__ == '__main__':
    cli()
