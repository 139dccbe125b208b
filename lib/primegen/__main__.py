import argparse
import sys
from pathlib import Path

from .config import Configuration, DEFAULT_CAPACITY_PER_FILE, DEFAULT_FILE_PREFIX, DEFAULT_FILE_EXTENSION, \
    DEFAULT_NUM_WORKERS, DEFAULT_CHUNK_SIZE
from .debug import init_dir, log, write_failure_report, FAILURE_LOG_FILENAME
from .engine import GenerationEngine
from .events import Listener
from .journal import CheckpointJournal
from .resultstore import ResultStore
from ._utilities.signals import CancelFlag, cancel_on_signals

def resolved_Path(str_):

    path = Path(str_)

    if path.is_absolute():
        return path

    else:
        return Path.cwd() / str_

def _check_raise_directory(path):

    if not path.exists():
        raise FileNotFoundError(path)

    elif not path.is_dir():
        raise NotADirectoryError(path)

def _add_dir_argument(parser):
    parser.add_argument(
        '-d', '--dir', help = 'Directory of the result files (default: current directory)', default = Path.cwd(),
        type = resolved_Path
    )

def _add_file_name_arguments(parser):

    parser.add_argument(
        '--prefix', help = f'Result filename prefix (default: {DEFAULT_FILE_PREFIX})', default = DEFAULT_FILE_PREFIX
    )
    parser.add_argument(
        '--ext', help = f'Result file extension (default: {DEFAULT_FILE_EXTENSION})', default = DEFAULT_FILE_EXTENSION
    )

def _add_capacity_argument(parser):
    parser.add_argument(
        '-c', '--capacity', help = f'Primes per result file (default: {DEFAULT_CAPACITY_PER_FILE})',
        default = DEFAULT_CAPACITY_PER_FILE, type = int
    )

class ConsoleListener(Listener):

    def __init__(self, verbose = False):
        self.verbose = verbose

    def on_load_started(self):
        log('Loading existing primes...')

    def on_load_progress(self, file_ordinal, total_files):

        if self.verbose:
            log(f'Loading result file {file_ordinal} of {total_files}.')

    def on_load_finished(self, primes_loaded, files_loaded):

        if files_loaded == 0:
            log('No existing primes found, starting from scratch.')

        else:
            log(f'Loaded {primes_loaded} primes from {files_loaded} result files.')

    def on_generation_started(self):
        log('Generating prime numbers...')

    def on_checkpoint_written(self, event):
        log(str(event))

    def on_state_changed(self, old_state, new_state):

        if self.verbose:
            log(f'{old_state} -> {new_state}')

def _run(args):

    _check_raise_directory(args.dir)
    config = Configuration.from_args(args)

    if args.log_dir is not None:
        init_dir(args.log_dir)

    listeners = [ConsoleListener(args.verbose)]
    journal = None

    if not args.no_journal:

        journal = CheckpointJournal.for_config(config, args.dir)
        listeners.append(journal)

    print('Press Ctrl+C to stop.')

    try:

        with cancel_on_signals(CancelFlag()) as flag:

            engine = GenerationEngine(config, args.dir, flag, listeners = listeners)

            try:
                state = engine.run()

            except Exception as e:

                report = write_failure_report(e, args.dir / FAILURE_LOG_FILENAME)
                print(f'Generation failed: {type(e).__name__}: {e}', file = sys.stderr)
                print(f'See `{report}` for details.', file = sys.stderr)
                return 1

    finally:

        if journal is not None:
            journal.close()

    log(f'Stopped. {len(state.cache)} primes in memory, next number to check: {state.next_candidate}.')
    return 0

def _status(args):

    _check_raise_directory(args.dir)
    config = Configuration(capacity_per_file = args.capacity, file_prefix = args.prefix, file_extension = args.ext)
    store = ResultStore(config, args.dir)
    files = store.list_checkpoint_files()

    if len(files) == 0:
        print(f'No result files in `{store.directory()}`.')
        return 0

    total = 0

    for index, path in files.items():

        num_lines = store.count_lines(path)
        total += num_lines
        state = 'complete' if num_lines == config.capacity_per_file else 'partial'
        print(f'{index:>6}  {num_lines:>10}  {state:<8}  {path.name}')

    print(f'{total} primes in {len(files)} result files.')
    return 0

def _history(args):

    _check_raise_directory(args.dir)
    config = Configuration(file_prefix = args.prefix)

    try:
        journal = CheckpointJournal.for_config(config, args.dir, readonly = True)

    except FileNotFoundError as e:

        print(str(e), file = sys.stderr)
        return 1

    with journal:

        for event in journal.events():
            print(str(event))

    return 0

def build_parser():

    ###########################
    #         COMMAND         #
    parser_command = argparse.ArgumentParser(
        prog = 'primegen',
        description = 'Find prime numbers by trial division and save them to result files.'
    )
    subparsers = parser_command.add_subparsers(required = True, dest = 'command')
    ###########################
    #           RUN           #
    parser_run = subparsers.add_parser('run', help = 'Resume generating primes until Ctrl+C.')
    _add_dir_argument(parser_run)
    _add_capacity_argument(parser_run)
    _add_file_name_arguments(parser_run)
    parser_run.add_argument(
        '-m', '--max-cached', help = 'Maximum number of primes kept in memory (default: unlimited)', type = int,
        default = None, dest = 'max_cached'
    )
    parser_run.add_argument(
        '-w', '--workers', help = f'Trial division threads (default: {DEFAULT_NUM_WORKERS})', type = int,
        default = DEFAULT_NUM_WORKERS
    )
    parser_run.add_argument(
        '--chunk-size', help = f'Trial factors per thread task (default: {DEFAULT_CHUNK_SIZE})', type = int,
        default = DEFAULT_CHUNK_SIZE, dest = 'chunk_size'
    )
    parser_run.add_argument(
        '--no-journal', help = 'Do not record checkpoint writes in the journal.', action = 'store_true',
        dest = 'no_journal'
    )
    parser_run.add_argument(
        '-l', '--log-dir', help = 'Also write log lines to a timestamped directory here.', type = resolved_Path,
        default = None, dest = 'log_dir'
    )
    parser_run.add_argument('-v', '--verbose', help = 'Display additional info.', action = 'store_true')
    ###########################
    #         STATUS          #
    parser_status = subparsers.add_parser('status', help = 'List the trusted result files.')
    _add_dir_argument(parser_status)
    _add_capacity_argument(parser_status)
    _add_file_name_arguments(parser_status)
    ###########################
    #         HISTORY         #
    parser_history = subparsers.add_parser('history', help = 'Print the checkpoint journal.')
    _add_dir_argument(parser_history)
    parser_history.add_argument(
        '--prefix', help = f'Result filename prefix (default: {DEFAULT_FILE_PREFIX})', default = DEFAULT_FILE_PREFIX
    )
    return parser_command

def main(argv = None):

    args = build_parser().parse_args(argv)

    if args.command == 'run':
        return _run(args)

    elif args.command == 'status':
        return _status(args)

    elif args.command == 'history':
        return _history(args)

    else:
        raise NotImplementedError

if __name__ == '__main__':
    sys.exit(main())
