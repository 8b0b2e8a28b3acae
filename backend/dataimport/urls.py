from django.urls import path

from . import views

app_name = "dataimport"

urlpatterns = [
    path("instructions/", views.InstructionsView.as_view(), name="migration-instructions"),
    path("import-csv/", views.ImportCSVView.as_view(), name="migration-import"),
    path("export/", views.ExportView.as_view(), name="migration-export"),
    path("status/", views.StatusView.as_view(), name="migration-status"),
]
