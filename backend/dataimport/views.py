# dataimport/views.py
"""
Legacy data migration endpoints.

    GET  instructions/  how to run a migration         (migration.view)
    POST import-csv/    upload a CSV/XLSX table         (migration.import)
    GET  export/        download the ledger as JSON     (migration.export)
    GET  status/        record counts                   (migration.view)
"""

import csv
import json
import logging
from zipfile import BadZipFile

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponse
from django.utils import timezone
from openpyxl.utils.exceptions import InvalidFileException
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from accounting.exceptions import ValidationError
from .importers import INSTRUCTIONS, export_all, import_rows, migration_status
from .mappers import detect_table_type
from .parsers import detect_and_parse
from .serializers import ImportUploadSerializer

logger = logging.getLogger(__name__)


class InstructionsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        require(resolve_actor(request), "migration.view")
        return Response(INSTRUCTIONS)


class StatusView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        require(resolve_actor(request), "migration.view")
        return Response(migration_status())


class ImportCSVView(APIView):
    """
    POST multipart/form-data with ``file`` and an optional ``table_type``.

    Without table_type the table is guessed from the header row.
    """
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "migration.import")

        serializer = ImportUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upload = serializer.validated_data["file"]

        if upload.size > settings.LEDGER_IMPORT_MAX_BYTES:
            raise ValidationError(
                f"File too large. Maximum size is {settings.LEDGER_IMPORT_MAX_BYTES} bytes.",
            )

        try:
            _, rows = detect_and_parse(upload, upload.name)
        except ValueError as exc:
            raise ValidationError(str(exc))
        except (BadZipFile, InvalidFileException, csv.Error) as exc:
            logger.warning("Import file unreadable", extra={"upload_name": upload.name, "error": str(exc)})
            raise ValidationError(f"Could not read file: {exc}")

        if not rows:
            raise ValidationError("No data rows found in file.")

        columns = list(rows[0].keys())
        table_type = serializer.validated_data.get("table_type") or detect_table_type(columns)

        report = import_rows(actor, table_type, rows)

        return Response(
            {
                "message": f"Imported {report.imported} {table_type} record(s).",
                **report.to_dict(),
                "columns": columns,
            },
            status=status.HTTP_201_CREATED if report.imported else status.HTTP_200_OK,
        )


class ExportView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        require(resolve_actor(request), "migration.export")

        payload = {
            "exported_at": timezone.now().isoformat(),
            **export_all(),
        }
        filename = f"ledger_export_{timezone.localdate():%Y%m%d}.json"
        response = HttpResponse(
            json.dumps(payload, cls=DjangoJSONEncoder, indent=2),
            content_type="application/json",
        )
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response
