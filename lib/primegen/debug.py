import os
import datetime
import traceback

from ._utilities import check_return_Path, check_type

_log_file = None
_file_datetime_format = '%Y-%m-%d-%H-%M-%S-%f'
_line_datetime_format = '%H:%M:%S.%f'

FAILURE_LOG_FILENAME = "GeneratorFailureLog.txt"

def init_dir(parent_dir):

    parent_dir = check_return_Path(parent_dir, 'parent_dir')
    dir_ = parent_dir / datetime.datetime.now().strftime(_file_datetime_format)
    dir_.mkdir(parents = True)
    set_dir(dir_)
    return dir_

def set_dir(dir_):

    global _log_file

    if dir_ is None:
        _log_file = None

    else:

        dir_ = check_return_Path(dir_, 'dir_')
        _log_file = dir_ / f'{os.getpid()}.txt'

def log_file():
    return _log_file

def log(message, echo = True):

    check_type(message, 'message', str)

    if _log_file is not None:

        with _log_file.open('a') as fh:
            fh.write(f'{datetime.datetime.now().strftime(_line_datetime_format)} {message}\n')

    if echo:
        print(message)

def format_failure(e):

    lines = [
        f'Time: {datetime.datetime.now()}',
        f'Error: {type(e).__name__}',
        f'Message: {e}'
    ]

    if getattr(e, 'candidate', None) is not None:
        lines.append(f'Current number to check: {e.candidate}')

    for attr in ('index', 'path'):

        if getattr(e, attr, None) is not None:
            lines.append(f'Result file {attr}: {getattr(e, attr)}')

    lines.append('Stack Trace:')
    lines.append(''.join(traceback.format_exception(type(e), e, e.__traceback__)).rstrip('\n'))
    return '\n'.join(lines) + '\n'

def write_failure_report(e, path = None):

    if path is None:
        path = FAILURE_LOG_FILENAME

    path = check_return_Path(path, 'path')

    with path.open('w', encoding = 'utf-8') as fh:
        fh.write(format_failure(e))

    log(f'{type(e).__name__}: {e}', echo = False)
    return path
