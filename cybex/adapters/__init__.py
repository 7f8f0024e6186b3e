"""
Adapters — narrow seams between components and the host system.

    base.py      — Adapter / PackageManager / ServiceManager / BootloaderConfig
    registry.py  — AdapterRegistry, the set of bindings a run uses
    mock.py      — in-memory fakes for tests
"""
