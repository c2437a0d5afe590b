"""SVG weather dashboard generator."""
import argparse
import logging
import os
import signal
import sys
import time

from dashboard_clock import Clock, FixedClock, SystemClock
from dashboard_generator import generate_dashboard
from dashboard_settings import DashboardSettings, load_settings
from forecast_provider import ForecastProviderError
from forecast_service import ForecastService
from open_meteo_provider import OpenMeteoProvider
from template_renderer import TemplateRenderError

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "weather-dashboard.log")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("SVG weather dashboard")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--template", default=None, help="Template SVG (overrides DASHBOARD_TEMPLATE_PATH)")
    parser.add_argument("--output", default=None, help="Output SVG (overrides DASHBOARD_OUTPUT_SVG_PATH)")
    parser.add_argument("--simulate-time", default=None,
                        help="Pretend the current time is this ISO timestamp, e.g. 2025-10-09T22:00:00Z")
    parser.add_argument("--loop", action="store_true", help="Keep regenerating until interrupted")
    parser.add_argument("--refresh", type=float, default=900.0, help="Seconds between refreshes in --loop mode")
    parser.add_argument("--cache-ttl", type=int, default=600)
    parser.add_argument("--max-retries", type=int, default=3)
    parser.add_argument("--retry-delay", type=float, default=2.0)
    return parser.parse_args(argv)


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def build_clock(simulate_time) -> Clock:
    if not simulate_time:
        return SystemClock()
    try:
        clock = FixedClock.from_isoformat(simulate_time)
    except ValueError as exc:
        raise SystemExit(f"Invalid --simulate-time: {exc}") from exc
    logging.info("Simulating time: %s (UTC)", clock.now_utc().isoformat())
    return clock


def build_forecast_service(settings: DashboardSettings, args: argparse.Namespace) -> ForecastService:
    provider = OpenMeteoProvider(
        lat=settings.api.latitude,
        lon=settings.api.longitude,
        temp_unit=settings.render_options.temp_unit,
        timeout=settings.api.timeout,
    )
    service = ForecastService(
        provider=provider,
        cache_ttl_seconds=args.cache_ttl,
        max_retries=args.max_retries,
        retry_delay_seconds=args.retry_delay,
    )
    logging.info("Forecast service ready (provider=%s cache ttl=%ss)", provider.provider_name, args.cache_ttl)
    return service


def run_once(settings: DashboardSettings, clock: Clock, service: ForecastService,
             args: argparse.Namespace) -> bool:
    """Generate the dashboard once, logging any failure. Returns True on success."""
    try:
        context = generate_dashboard(
            settings,
            clock,
            service,
            template_path=args.template,
            output_path=args.output,
        )
    except ForecastProviderError as err:
        logging.error("Forecast fetch failed: %s", err)
        return False
    except TemplateRenderError as err:
        logging.error("Template rendering failed: %s", err)
        return False
    except OSError as err:
        logging.error("Could not read template or write dashboard: %s", err)
        return False

    if context.diagnostics:
        logging.info("Banner: %s", context.diagnostic_message)
    return True


def dashboard_loop(settings: DashboardSettings, clock: Clock, service: ForecastService,
                   args: argparse.Namespace) -> None:
    frame = 0
    while True:
        frame += 1
        logging.info("Refresh %s: generating dashboard", frame)
        try:
            run_once(settings, clock, service, args)
        except Exception as exc:
            logging.exception("Unexpected error: %s", exc)

        time.sleep(max(args.refresh, 1.0))


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main(argv=None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    settings = load_settings()
    clock = build_clock(args.simulate_time)
    service = build_forecast_service(settings, args)

    if not args.loop:
        if not run_once(settings, clock, service, args):
            sys.exit(1)
        return

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        dashboard_loop(settings, clock, service, args)
    except KeyboardInterrupt:
        logging.info("Stopping dashboard loop")


if __name__ == "__main__":
    main()
