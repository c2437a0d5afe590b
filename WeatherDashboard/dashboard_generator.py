"""One dashboard refresh: fetch forecasts, build the context, render and write the SVG."""
import logging
import os
from typing import List, Optional

from dashboard_clock import Clock
from dashboard_context import Context, ContextBuilder
from dashboard_diagnostics import Diagnostic
from dashboard_settings import DashboardSettings
from forecast_provider import FetchResult, ForecastProviderError
from forecast_service import ForecastService
from hourly_graph import GraphRendererBase
from last_run_status import read_last_run_status, write_last_run_status
from template_renderer import TemplateRenderError, render_template


def _collect_warning(result: FetchResult, warnings: List[Diagnostic]) -> None:
    if result.warning is not None:
        logging.warning(f"Fetch warning: {result.warning.long_description}")
        warnings.append(result.warning)


def generate_dashboard(
    settings: DashboardSettings,
    clock: Clock,
    service: ForecastService,
    template_path: Optional[str] = None,
    output_path: Optional[str] = None,
    graph_renderer: Optional[GraphRendererBase] = None,
) -> Context:
    """
    Produce the dashboard SVG once.

    A failure recorded by the previous run is shown as an "update failed"
    diagnostic. This run's outcome is recorded for the next one.

    Args:
        settings: Dashboard settings
        clock: Time source
        service: Forecast service for the daily and hourly series
        template_path: Template override (defaults to settings.paths.template_path)
        output_path: Output override (defaults to settings.paths.output_svg_path)
        graph_renderer: Graph renderer override

    Returns:
        Context: The context the SVG was rendered from

    Raises:
        ForecastProviderError: If a series could not be fetched and nothing is cached
        TemplateRenderError: If the template references an unknown field
        OSError: If the template cannot be read or the output cannot be written
    """
    template_path = template_path or settings.paths.template_path
    output_path = output_path or settings.paths.output_svg_path
    status_file = settings.paths.status_file

    warnings: List[Diagnostic] = []
    previous_error = read_last_run_status(status_file)
    if previous_error:
        logging.info(f"Previous run failed: {previous_error}")
        warnings.append(Diagnostic.update_failed(previous_error))

    try:
        daily = service.get_daily()
        _collect_warning(daily, warnings)
        hourly = service.get_hourly()
        _collect_warning(hourly, warnings)

        builder = ContextBuilder(settings, clock, graph_renderer)
        context = builder.build(daily.records, hourly.records, warnings)

        with open(template_path, "r", encoding="utf-8") as f:
            template = f.read()
        svg = render_template(template, context.to_template_fields())

        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(svg)
    except (ForecastProviderError, TemplateRenderError, OSError) as e:
        write_last_run_status(status_file, str(e))
        raise

    write_last_run_status(status_file, None)
    logging.info(f"Dashboard written to {output_path} ({len(context.diagnostics)} diagnostic(s))")
    return context
