"""
Core services — probing, backups, installing and preflight.

    probe.py          absent / current / stale by content hash
    backup.py         timestamped backups and restore
    installer.py      ensure/restore primitives used by components
    preflight.py      run-wide requirement checks
    shell_profile.py  managed blocks in user files
"""
