"""extconf scan [--force]"""

from extconf.cli.output import print_result


def register(subparsers):
    p = subparsers.add_parser("scan", help="Scan extensions and refresh the cache")
    p.add_argument("--force", action="store_true",
                   help="Check every extension for changes")
    p.set_defaults(handler=handle)


def handle(args, settings):
    from extconf.manager import ExtensionManager

    if args.force:
        settings = settings.model_copy(update={"force_rescan": True})
    manager = ExtensionManager.from_settings(settings)
    scan = manager.last_scan
    print_result({
        "extensions": sorted(scan.extensions),
        "changes": {name: kind.name.lower() for name, kind in scan.changes.items()},
        "removed": scan.removed,
        "failed": scan.failed,
        "anomalies": [str(anomaly) for anomaly in scan.anomalies],
        "from_cache": scan.from_cache,
        "saved": scan.saved,
    })
