from __future__ import annotations

import csv
import io

from flask import Flask, request

from ..auth.guards import admin_required
from ..common.datetime_utils import parse_iso_date
from ..common.validators import parse_id, require_query_params
from ..container import Container
from .service import REPORT_FIELDS, SUMMARY_FIELDS


def register(app: Flask, container: Container) -> None:
    service = container.checkin_report_service

    def _write_csv(*, rows: list[dict], fields: list[str], filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=fields)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        # BOM so spreadsheet apps pick up UTF-8 names.
        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    def _build_report(kind: str):
        term_id = parse_id(require_query_params(request.args, ["termId"])["termId"], "termId")
        start = parse_iso_date(request.args["start"]) if request.args.get("start") else None
        end = parse_iso_date(request.args["end"]) if request.args.get("end") else None

        data = service.build_checkin_report(term_id=term_id, start=start, end=end)
        suffix = "_".join(d.strftime("%Y%m%d") for d in (start, end) if d)
        filename = f"{kind}_term{term_id}{'_' + suffix if suffix else ''}.csv"
        return data, filename

    @app.route("/api/reports/checkins.csv", methods=["GET"], endpoint="checkins_report_csv")
    @admin_required
    def checkins_report_csv():
        data, filename = _build_report("checkins")
        return _write_csv(rows=data.rows, fields=REPORT_FIELDS, filename=filename)

    @app.route("/api/reports/checkins-summary.csv", methods=["GET"], endpoint="checkins_summary_csv")
    @admin_required
    def checkins_summary_csv():
        data, filename = _build_report("hours")
        return _write_csv(rows=data.summary, fields=SUMMARY_FIELDS, filename=filename)
