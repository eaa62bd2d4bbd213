## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# stacklang — A tiny PostScript-like stack language, executed one observable step at a time.
#

import sys
import time
from pathlib import Path
from dataclasses import dataclass

import click

from .types import OutputEvent
from .errors import StackLangError
from .formatting import write_without_ansi, format_value, format_stack, format_scopes, show_event
from .runtime import execute


@dataclass(frozen=True)
class RuntimeConfig:
    verbose: int
    delay: float
    ignore: bool
    stats: bool
    plain: bool


@dataclass
class ExecutionItem:
    source: str
    filename: str


class StackLangRunner:
    def __init__(self, config: RuntimeConfig):
        self.verbose = config.verbose
        self.delay = config.delay
        self.ignore = config.ignore
        self.stats_enabled = config.stats
        self.plain = config.plain

        if self.plain:
            writer = write_without_ansi(sys.stdout.write)
            sys.stdout.write, sys.stderr.write = writer, writer

        self.total_stats = {'events': 0, 'start': time.time()} if self.stats_enabled else None
        self.failure = False
        self.executed_items = 0

    def _observe(self, event) -> None:
        self._step += 1
        if self.verbose >= 2:
            show_event(event, step=self._step)
        elif isinstance(event, OutputEvent):
            print('\033[97m' + format_value(event.value) + '\033[0m')
        else:
            return
        # Pacing only applies to what is rendered, never to evaluation order.
        if self.delay > 0: time.sleep(self.delay)

    def _handle_exception(self, exc: StackLangError, filename: str) -> None:
        where = f"`\033[97m{filename}\033[0m`" + (f", line {exc.line}" if exc.line is not None else '')
        token = f"Token `\033[1;97m{exc.token}\033[0m`" if exc.token is not None else "Program"
        print(f'\033[30;43m RUNTIME ERROR. \033[0m {token} from {where} caused an error! (Exception: \033[33m{type(exc).__name__}\033[0m)', file=sys.stderr)
        print(f'\033[90m{exc}\033[0m', file=sys.stderr)
        if exc.state is not None:
            print(f'\033[1;33m  Stack content is\033[0;33m\n    {format_stack(exc.state.stack)}\033[0m', file=sys.stderr)
            if scopes := format_scopes(exc.state.scopes):
                print(f'\033[1;33m  Local scopes are\033[0;33m\n    ' + scopes.replace('\n', '\n    ') + '\033[0m', file=sys.stderr)
        self.failure = True
        if not self.ignore: sys.exit(1)

    def execute_items(self, items, print_result: bool = False) -> None:
        for item in items:
            self._execute_script(item.source, item.filename, print_result=print_result)

    def _execute_script(self, source: str, filename: str, print_result: bool = False) -> None:
        self._step = 0
        try:
            result = execute(source, observer=self._observe)
        except StackLangError as exc:
            self._handle_exception(exc, filename)
            return

        self.executed_items += 1
        if self.total_stats is not None:
            self.total_stats['events'] += result.steps
        if self.verbose >= 1:
            print(f"\033[90m  stack :\033[0m  {format_stack(result.state.stack)}")
        elif print_result and result.top is not None:
            print(format_value(result.top))

    def finalize(self) -> int:
        if self.total_stats and self.executed_items > 0:
            elapsed_time = time.time() - self.total_stats['start']
            print(f"\n\033[97m\033[48;5;30m STATISTICS. \033[0m")
            print(f"events\t\033[97m{self.total_stats['events']:,}\033[0m")
            print(f"time\t\033[97m{elapsed_time:.3f}s\033[0m")
        return 1 if self.failure else 0


def _inline_command_source(index: int, command: str) -> ExecutionItem:
    return ExecutionItem(command, f'<INPUT_{index}>')


def _parse_dev_tokens(tokens: list[str]) -> list[tuple[str, Path | str]]:
    actions: list[tuple[str, Path | str]] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token == '--':
            index += 1
            continue
        if token in ('-c', '--command'):
            index += 1
            if index >= len(tokens):
                raise click.BadParameter("Missing inline code after -c/--command option.")
            actions.append(('command', tokens[index]))
            index += 1
            continue
        if token.startswith('-c=') or token.startswith('--command='):
            _, value = token.split('=', 1)
            if value == '':
                raise click.BadParameter("Empty code supplied to command option.")
            actions.append(('command', value))
            index += 1
            continue
        if token.startswith('-'):
            raise click.BadParameter(f"Unknown option `{token}`.")
        path = Path(token)
        if not path.exists():
            raise click.BadParameter(f"File `{token}` not found.")
        actions.append(('file', path))
        index += 1
    return actions


@click.group(invoke_without_command=True, context_settings={'ignore_unknown_options': True, 'allow_extra_args': True})
@click.option('--verbose', '-v', default=0, count=True, help='Print the final stack; twice to trace every event.')
@click.option('--delay', '-d', default=0.0, type=float, envvar='STACKLANG_DELAY', show_envvar=True,
              help='Seconds to wait after each rendered event.')
@click.option('--ignore', '-i', is_flag=True, help='Ignore errors and continue executing.')
@click.option('--stats', is_flag=True, help='Display execution statistics (e.g., number of events).')
@click.option('--plain', '-p', is_flag=True, help='Strip ANSI color codes and redirect stderr to stdout.')
@click.pass_context
def cli(ctx: click.Context, verbose: int, delay: float, ignore: bool, stats: bool, plain: bool) -> None:
    ctx.ensure_object(dict)
    ctx.obj['config'] = RuntimeConfig(verbose=verbose, delay=delay, ignore=ignore, stats=stats, plain=plain)


@cli.command('run-file')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def run_file(ctx: click.Context, script) -> None:
    runner = StackLangRunner(ctx.obj['config'])
    runner.execute_items((ExecutionItem(script.read(), script.name or '<STDIN>'),))
    ctx.exit(runner.finalize())


@cli.command('run-dev', context_settings={'ignore_unknown_options': True, 'allow_extra_args': True})
@click.argument('tokens', nargs=-1)
@click.pass_context
def run_dev(ctx: click.Context, tokens: tuple[str, ...]) -> None:
    runner = StackLangRunner(ctx.obj['config'])
    actions = _parse_dev_tokens(list(tokens))

    command_index = 1
    for action, payload in actions:
        if action == 'file':
            runner.execute_items((ExecutionItem(payload.read_text(encoding='utf-8'), str(payload)),))
        elif action == 'command':
            runner.execute_items((_inline_command_source(command_index, payload),), print_result=True)
            command_index += 1
        else:
            raise NotImplementedError

    ctx.exit(runner.finalize())


def main(argv: list[str] | None = None) -> None:
    a = list(sys.argv[1:] if argv is None else argv)
    g, r, i = [], [], 0
    while i < len(a):
        t = a[i]
        if t in ('--ignore', '--stats', '--plain', '-i', '-p') or (t.startswith('-v') and set(t[1:]) == {'v'}) or t == '--verbose':
            g.append(t)
        elif t in ('--delay', '-d') and i + 1 < len(a):
            g.extend(a[i:i+2]); i += 1
        elif t.startswith('--delay='):
            g.append(t)
        else:
            r.append(t)
        i += 1

    if len(r) == 0 or r == ['-']:
        cmd, tail = 'run-file', ['-']
    else:
        cmd, tail = 'run-dev', r

    cli.main(args=[*g, cmd, *tail], prog_name='stacklang')


if __name__ == "__main__":
    main()
