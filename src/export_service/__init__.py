"""Service shell for the IoTDB export engine: settings, config updates, CLI."""
