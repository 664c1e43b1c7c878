"""
Entrypoint: load .env and config, init logging, open one URL and write
the body (or its metadata) out.

  curlagent http://www.example.com/ -H "Accept-Language: en" --meta
"""

import argparse
import sys

import httpx
import pycurl
import structlog
from dotenv import load_dotenv

from .agent import ENGINES, CurlAgent, engine_class
from .config import Config
from .errors import ArgumentError
from .log import configure_logging

logger = structlog.get_logger(__name__)


def _parse_header(value: str):
    name, sep, content = value.partition(':')
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected 'Name: value', got {value!r}")
    return name.strip(), content.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="curlagent",
        description="Fetch a URL through libcurl with OpenURI-style options.",
    )
    parser.add_argument("url", help="URL to open")
    parser.add_argument(
        "-H", "--header", action="append", type=_parse_header, default=[], metavar="'NAME: VALUE'",
        help="Extra request header, may be repeated",
    )
    parser.add_argument("--proxy", metavar="URL", help="Proxy URL")
    parser.add_argument("--proxy-user", metavar="USER:PASSWORD", help="Proxy credentials")
    parser.add_argument("--user", metavar="USER:PASSWORD", help="Basic auth credentials")
    parser.add_argument("--read-timeout", type=float, metavar="SECS", help="Overall transfer timeout")
    parser.add_argument("--cacert", metavar="PATH", help="CA bundle to verify the peer with")
    parser.add_argument("--engine", choices=sorted(ENGINES), help="Transfer engine (default: from config)")
    parser.add_argument("--meta", action="store_true", help="Print status and response headers instead of the body")
    parser.add_argument("--charset", action="store_true", help="Print the detected charset instead of the body")
    parser.add_argument("-o", "--output", metavar="FILE", help="Write the body to FILE")
    return parser


def _options(args: argparse.Namespace) -> dict:
    options = dict(args.header)
    if args.proxy:
        options['proxy'] = args.proxy
    if args.proxy_user:
        options['proxy_http_basic_authentication'] = args.proxy_user
    if args.user:
        options['http_basic_authentication'] = args.user
    if args.read_timeout is not None:
        options['read_timeout'] = args.read_timeout
    if args.cacert:
        options['ssl_ca_cert'] = args.cacert
    return options


def _write(result, args: argparse.Namespace):
    if args.meta:
        code, _ = result.status
        print(code)
        for name, value in result.meta.items():
            print(f"{name}: {value}")
    elif args.charset:
        print(result.charset)
    elif args.output:
        with open(args.output, 'wb') as f:
            f.write(result.read())
    else:
        sys.stdout.buffer.write(result.read())
        sys.stdout.flush()


def main(argv=None) -> int:
    load_dotenv()
    # Re-read so that variables from .env override the packaged defaults
    config = Config()
    configure_logging(config.logging.get("level", "INFO"))

    args = build_parser().parse_args(argv)
    engine_factory = engine_class(args.engine) if args.engine else None

    try:
        CurlAgent.open(args.url, _options(args), engine_factory=engine_factory,
                       settings=config.agent, callback=lambda result: _write(result, args))
    except ArgumentError as e:
        logger.error("invalid_arguments", url=args.url, error=str(e))
        return 2
    except (pycurl.error, httpx.HTTPError) as e:
        logger.error("transfer_failed", url=args.url, error=str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
