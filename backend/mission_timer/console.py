"""Terminal front end for the mission timer.

    mission-timer play --name AGENT1
    mission-timer board
    mission-timer edit <id> --name NEW
    mission-timer delete <id>
    mission-timer interrupt
"""

import logging
import threading

import click

from mission_timer.client.channel import InterruptChannel
from mission_timer.client.leaderboard import DEFAULT_SERVER_URL, LeaderboardClient
from mission_timer.engine import MissionTimer, format_ms
from mission_timer.exceptions import ChannelUnavailable, MissionTimerError

MEDALS = {1: '🥇', 2: '🥈', 3: '🥉'}
STATUS_COLORS = {'alert': 'red', 'error': 'red', 'success': 'green', 'warning': 'yellow'}


def render_board(entries):
    if not entries:
        return 'No missions completed yet. Be the first agent to beat the challenge!'
    lines = []
    for position, entry in enumerate(entries, start=1):
        label = MEDALS.get(position, f'{position}.')
        lines.append(f'{label:>4} {entry.name:<24} {format_ms(entry.time_ms)}  [{entry.id}]')
    return '\n'.join(lines)


class ConsoleView:
    """Draws timer readings on a single refreshing line plus status lines."""

    def __init__(self, echo=click.echo):
        self.echo = echo
        self._lock = threading.Lock()

    def render_reading(self, reading):
        line = (
            f'\rTIME {format_ms(reading.elapsed_ms)} | '
            f'PENALTIES {reading.penalty_count} x +5s | '
            f'TOTAL {format_ms(reading.total_ms)}'
        )
        with self._lock:
            self.echo(line, nl=False)

    def status(self, message, level='info'):
        color = STATUS_COLORS.get(level)
        with self._lock:
            self.echo('')
            self.echo(click.style(message, fg=color, bold=level == 'alert') if color else message)

    def alert(self, count, payload=None):
        # Terminal bell stands in for the alarm sound
        with self._lock:
            self.echo('\a', nl=False)

    def warn(self, message):
        self.status(message, 'warning')


@click.group()
@click.option('--server', envvar='MISSION_TIMER_SERVER', default=DEFAULT_SERVER_URL, show_default=True,
              help='Base URL of the mission timer server.')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging.')
@click.pass_context
def cli(ctx, server, verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    ctx.obj = {'server': server, 'client': LeaderboardClient(server)}


@cli.command()
@click.option('--name', prompt='Agent code', help='Player identifier recorded on the leaderboard.')
@click.option('--no-channel', is_flag=True, help='Do not subscribe to automatic penalties.')
@click.pass_obj
def play(obj, name, no_channel):
    """Run one mission: Enter finishes it, 'r' resets it."""
    client = obj['client']
    view = ConsoleView()
    done = threading.Event()

    def on_finished(outcome):
        if outcome.saved:
            try:
                view.status(render_board(client.list()))
            except MissionTimerError as exc:
                view.status(f'Could not load the Hall of Fame: {exc}', 'error')
        view.status('Press Enter to exit.')
        done.set()

    timer = MissionTimer(
        client,
        on_tick=view.render_reading,
        on_alert=view.alert,
        on_status=view.status,
        on_finished=on_finished,
    )

    channel = None
    if not no_channel:
        channel = InterruptChannel(obj['server'], timer.handle_interrupt, on_warning=view.warn)
        try:
            channel.connect()
        except ChannelUnavailable as exc:
            view.warn(str(exc))
            channel = None

    try:
        try:
            timer.start(name)
        except MissionTimerError as exc:
            raise click.ClickException(str(exc))
        view.status("Press Enter to finish the mission, or type 'r' and Enter to reset.")
        stdin = click.get_text_stream('stdin')
        while not done.is_set():
            line = stdin.readline()
            if done.is_set():
                break
            if line.strip().lower() == 'r':
                timer.reset()
                break
            timer.finish()
    except KeyboardInterrupt:
        timer.reset()
    finally:
        if channel is not None:
            channel.close()


@cli.command()
@click.pass_obj
def board(obj):
    """Show the Hall of Fame, fastest first."""
    try:
        entries = obj['client'].list()
    except MissionTimerError as exc:
        raise click.ClickException(f'Could not load the Hall of Fame: {exc}')
    click.echo(render_board(entries))


@cli.command()
@click.argument('entry_id')
@click.option('--name', default=None, help='New agent code.')
@click.option('--time-ms', type=int, default=None, help='New time in milliseconds.')
@click.pass_obj
def edit(obj, entry_id, name, time_ms):
    """Rename an entry or correct its time."""
    if name is None and time_ms is None:
        raise click.UsageError('Nothing to change: pass --name and/or --time-ms.')
    try:
        entry = obj['client'].update(entry_id, name=name, time_ms=time_ms)
    except MissionTimerError as exc:
        raise click.ClickException(str(exc))
    click.echo(f'Updated {entry.id}: {entry.name} {format_ms(entry.time_ms)}')


@cli.command()
@click.argument('entry_id')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation.')
@click.pass_obj
def delete(obj, entry_id, yes):
    """Remove an entry from the Hall of Fame."""
    if not yes:
        click.confirm('Are you sure you want to delete this record?', abort=True)
    try:
        entry = obj['client'].delete(entry_id)
    except MissionTimerError as exc:
        raise click.ClickException(str(exc))
    click.echo(f'Deleted {entry.id}: {entry.name} {format_ms(entry.time_ms)}')


@cli.command()
@click.pass_obj
def interrupt(obj):
    """Simulate a broken beam: every running mission gets +5s."""
    try:
        obj['client'].trigger_interrupt()
    except MissionTimerError as exc:
        raise click.ClickException(str(exc))
    click.echo('Interrupt sent (+5s).')


if __name__ == '__main__':
    cli()
