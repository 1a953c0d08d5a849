"""
Rich console output for the host sweep, with live per-host printing
"""

import threading
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.text import Text

from ..config import PROGRESS_INTERVAL
from ..models import HostInfo
from ..ports import service_name
from ..sweep import SweepSink, SweepProgress


def format_ports(ports: list[int]) -> str:
    """Port list with service names, e.g. 22 (SSH), 8081"""
    parts = []
    for port in ports:
        service = service_name(port)
        parts.append(f"{port} ({service})" if service else str(port))
    return ", ".join(parts)


class ProgressReporter(threading.Thread):
    """
    Polls the sweep's completed-host counter on a fixed interval and
    moves the progress bar; never touches the result list.
    """

    def __init__(self, progress: Progress, task_id, counter: SweepProgress,
                 interval: float = PROGRESS_INTERVAL):
        super().__init__(name="sweep-progress", daemon=True)
        self.progress = progress
        self.task_id = task_id
        self.counter = counter
        self.interval = interval
        self._stop_event = threading.Event()

    def run(self):
        while not self._stop_event.is_set():
            self._update()
            if self.counter.finished:
                break
            self._stop_event.wait(self.interval)
        self._update()

    def _update(self):
        done = self.counter.completed
        self.progress.update(
            self.task_id,
            completed=done,
            status=f"{done}/{self.counter.total} hosts scanned"
        )

    def stop(self):
        self._stop_event.set()
        self.join()


class ConsoleOutput(SweepSink):
    """
    Human-readable sweep transcript.

    Live mode prints each host as it completes above a progress bar;
    otherwise the hosts are listed in detail after the summary. Verbose
    adds ping statistics to every host block.
    """

    def __init__(self, console: Optional[Console] = None, verbose: bool = False,
                 live: bool = False, interval: float = PROGRESS_INTERVAL):
        self.console = console or Console()
        self.verbose = verbose
        self.live = live
        self.interval = interval
        self._progress: Optional[Progress] = None
        self._reporter: Optional[ProgressReporter] = None

    def create_progress(self, total: int) -> tuple[Progress, int]:
        """Create progress bar for the sweep"""
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]Scanning hosts..."),
            BarColumn(complete_style="cyan", finished_style="green"),
            TaskProgressColumn(),
            TextColumn("[dim]{task.fields[status]}"),
            console=self.console,
            transient=True
        )
        task_id = progress.add_task("sweep", total=total, status="")
        return progress, task_id

    def start(self, cidr: str, progress: SweepProgress):
        self.console.print(f"Starting network scan of {cidr}...")
        if not self.live:
            return

        self.console.print(f"Starting scan of {progress.total} hosts in {cidr}", style="dim")
        self._progress, task_id = self.create_progress(progress.total)
        self._progress.start()
        self._reporter = ProgressReporter(self._progress, task_id, progress, self.interval)
        self._reporter.start()

    def host_done(self, info: HostInfo):
        if self.live:
            self.console.print(self.render_host(info))

    def close(self):
        if self._reporter:
            self._reporter.stop()
            self._reporter = None
        if self._progress:
            self._progress.stop()
            self._progress = None

    def finish(self, cidr: str, results: list[HostInfo]):
        if self.live:
            self.console.print(f"\nScan complete. {len(results)} hosts scanned.")

        responding = sum(1 for info in results if info.is_reachable)
        self.console.print("\n[bold]Scan Summary:[/]")
        self.console.print(f"Total hosts scanned: {len(results)}")
        self.console.print(f"Hosts responding: {responding}")

        if not self.live:
            self.console.print("\n[bold]Detailed Results:[/]")
            for info in results:
                self.console.print(self.render_detail(info))

    def render_host(self, info: HostInfo):
        """One host as it completes: a status line, or a panel when verbose"""
        if not self.verbose:
            line = Text()
            if info.is_reachable:
                line.append("✓ ", style="green")
            else:
                line.append("✗ ", style="red")
            line.append(info.ip_address, style="cyan")
            if info.hostname:
                line.append(f" ({info.hostname})", style="yellow")
            line.append(f" - {len(info.open_ports)} open ports", style="magenta")
            return line

        stats = info.ping_stats
        content = Text()
        content.append("Host: ", style="dim")
        content.append(info.ip_address, style="bold cyan")
        if info.hostname:
            content.append("\nHostname: ", style="dim")
            content.append(info.hostname, style="yellow")
        content.append("\nStatus: ", style="dim")
        if info.is_reachable:
            content.append("Reachable", style="green")
        else:
            content.append("Unreachable", style="red")

        content.append("\n\nPing Statistics:", style="bold blue")
        content.append(
            f"\n  Packets: {stats.packets_sent} sent, {stats.packets_received} received, "
            f"{stats.packet_loss:.1f}% loss"
        )
        if stats.packets_received > 0:
            content.append(
                f"\n  Latency: {stats.min_latency:.2f} ms min, {stats.avg_latency:.2f} ms avg, "
                f"{stats.max_latency:.2f} ms max"
            )
            content.append(f"\n  Jitter: {stats.jitter:.2f} ms")

        if info.open_ports:
            content.append("\n\nOpen Ports: ", style="bold blue")
            content.append(format_ports(info.open_ports), style="magenta")

        if stats.error_message:
            content.append("\n\nError: ", style="bold red")
            content.append(stats.error_message, style="red")

        return Panel(
            content,
            border_style="green" if info.is_reachable else "red",
            padding=(0, 1)
        )

    def render_detail(self, info: HostInfo) -> Text:
        """Post-sweep listing entry"""
        stats = info.ping_stats
        text = Text()
        if info.is_reachable:
            text.append("✓ ", style="green")
        else:
            text.append("✗ ", style="red")
        text.append(info.ip_address, style="cyan")
        if info.hostname:
            text.append(f" ({info.hostname})", style="yellow")

        if stats.packets_received > 0:
            text.append("\n  Latency: ", style="dim")
            text.append(
                f"{stats.min_latency:.1f}ms min / {stats.avg_latency:.1f}ms avg / "
                f"{stats.max_latency:.1f}ms max"
            )
            text.append("\n  Packet Loss: ", style="dim")
            text.append(
                f"{stats.packet_loss:.1f}% ({stats.packets_received}/{stats.packets_sent})"
            )
            if self.verbose:
                text.append("\n  Jitter: ", style="dim")
                text.append(f"{stats.jitter:.2f} ms")

        if info.open_ports:
            text.append("\n  Open Ports: ", style="blue")
            text.append(format_ports(info.open_ports), style="magenta")

        if self.verbose and stats.error_message:
            text.append("\n  Error: ", style="red")
            text.append(stats.error_message, style="red")

        return text

    def print_error(self, message: str):
        """Print error message"""
        self.console.print(f"[bold red]Error:[/] {message}")
