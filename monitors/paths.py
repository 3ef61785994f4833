def derive_core_path(base: str, core_index: int) -> str:
    """Insert a ``core.<n>`` segment before the last segment of ``base``.

    ``core_index`` is 0-based as reported by mpstat; the emitted segment is 1-based,
    e.g. ``derive_core_path('environment.rpi.cpu.utilisation', 2)`` gives
    ``environment.rpi.cpu.core.3.utilisation``.
    """
    if not base:
        raise ValueError('base path must not be empty')
    if isinstance(core_index, bool) or not isinstance(core_index, int) or core_index < 0:
        raise ValueError(f'core index must be a non-negative integer, got {core_index!r}')
    *parents, leaf = base.split('.')
    return '.'.join(parents + ['core', str(core_index + 1), leaf])
