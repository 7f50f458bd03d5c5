"""
Strict HTTP Firewall demo server
"""
import argparse
import os

import uvicorn

from http_firewall.config.loader import get_settings


def main(argv=None):
    """Main CLI entry point"""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Run the demo application behind the strict HTTP firewall",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default (most restrictive) options
  python -m http_firewall

  # Options from a YAML file, e.g. {allowSemicolon: true, allowedHostnames: [localhost]}
  python -m http_firewall --options firewall.yaml --port 8080
        """
    )
    parser.add_argument('--host', default=settings.host, help='Interface to bind')
    parser.add_argument('--port', type=int, default=settings.listen_port, help='Port to listen on')
    parser.add_argument('--options', default=settings.options_file,
                        help='YAML file with firewall options')
    args = parser.parse_args(argv)

    # The app reads its settings again in its lifespan hook
    if args.options:
        os.environ["FIREWALL_OPTIONS_FILE"] = args.options

    uvicorn.run("http_firewall.main:app", host=args.host, port=args.port, log_config=None)


if __name__ == '__main__':
    main()
