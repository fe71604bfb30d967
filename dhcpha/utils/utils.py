"""
Helpers shared by the DHCP HA modules and routes: audit logging,
helper command execution, atomic file writes and JSON responses.
"""
import json
import logging
import os
import re
import subprocess
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app, jsonify

# Library modules log here; request handlers use current_app.logger
logger = logging.getLogger('dhcpha')

SYSTEM_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"
AUDIT_LOG_NAME = 'dhcpha.log'

# systemctl verbs that only read state and run without sudo
READONLY_SYSTEMCTL = frozenset({'is-active', 'is-enabled', 'status'})

_ANSI_ESCAPE = re.compile(r'\x1B\[[0-?]*[ -/]*[@-~]')


def write_to_log(category: str, message: str, level: str = 'info') -> bool:
    """
    Append one audit line to the log directory of the running app.

    Lines look like "[2024-05-01 12:30] [dhcp] [info] message". Failing to
    write the audit line never fails the request that triggered it.
    """
    stamp = datetime.now().strftime('%Y-%m-%d %H:%M')
    log_dir = Path(current_app.config['DHCPHA_LOG_DIR'])
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        with open(log_dir / AUDIT_LOG_NAME, 'a') as audit:
            audit.write(f"[{stamp}] [{category}] [{level}] {message}\n")
    except OSError as e:
        current_app.logger.error(f'Could not append to audit log: {str(e)}')
        return False
    return True


def _command_env(**extra: str) -> Dict[str, str]:
    env = dict(os.environ, PATH=SYSTEM_PATH)
    env.update(extra)
    return env


def execute_command(command: List[str], input_data: Optional[str] = None) -> Tuple[bool, str, str]:
    """
    Run a helper command to completion.

    Args:
        command: Program and arguments
        input_data: Text fed to the program's stdin, if any

    Returns:
        (success, stdout, stderr) with surrounding whitespace stripped;
        a program that cannot be started counts as a failure
    """
    logger.info(f"Running: {' '.join(command)}")
    try:
        completed = subprocess.run(
            command,
            input=input_data,
            capture_output=True,
            text=True,
            check=False,
            env=_command_env(),
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.error(f"Could not run {command[0]}: {str(e)}")
        return False, "", str(e)

    stdout, stderr = completed.stdout.strip(), completed.stderr.strip()
    if completed.returncode != 0:
        logger.warning(f"{command[0]} exited with status {completed.returncode}: {stderr}")
    return completed.returncode == 0, stdout, stderr


def execute_systemctl_command(command: str, service: str) -> Tuple[bool, str]:
    """Run 'systemctl <command> <service>', through sudo unless the verb is read-only."""
    argv = ['systemctl', command, service]
    if command not in READONLY_SYSTEMCTL:
        argv.insert(0, '/usr/bin/sudo')
    logger.debug(f"Running: {' '.join(argv)}")

    try:
        completed = subprocess.run(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=False,
            env=_command_env(SYSTEMD_COLORS='0'),
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.error(f"systemctl {command} {service} could not run: {str(e)}")
        return False, str(e)

    return completed.returncode == 0, _ANSI_ESCAPE.sub('', completed.stdout).strip()


def atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    """
    Replace a JSON file in one step.

    The document goes to a temporary file beside the target, is synced,
    then renamed over it; readers see the old or the new file, never a
    partial one.
    """
    target_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(target_dir, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(suffix='.json', dir=target_dir)
    try:
        with os.fdopen(fd, 'w') as tmp:
            json.dump(data, tmp, indent=2)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def _json_response(status: str, message: str, details: Optional[Dict[str, Any]], code: int):
    body: Dict[str, Any] = {'status': status, 'message': message}
    if details:
        body['details'] = details
    return jsonify(body), code


def error_response(message: str, status_code: int = 400, details: Optional[Dict[str, Any]] = None):
    """JSON error body {'status': 'error', 'message', 'details'?} with the given status code."""
    return _json_response('error', message, details, status_code)


def success_response(message: str, details: Optional[Dict[str, Any]] = None):
    """JSON success body {'status': 'success', 'message', 'details'?} with status 200."""
    return _json_response('success', message, details, 200)
