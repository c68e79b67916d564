"""
URL mappings for the ward nursing API.

Paths have no trailing slash (``APPEND_SLASH`` is off) to match the
front-end clients. Literal segments such as ``list`` and ``visit`` are
registered before the ``<int:pk>`` patterns.
"""
from django.urls import path, include

from .auth_views import signup_view, login_view, refresh_view, logout_view, status_view
from .views import health
from .views.patients import (
    patient_register,
    list_patients,
    patient_detail,
    patient_deactivate,
    patient_add_visit,
    patient_visits,
)
from .views.attachments import (
    upload_documents,
    list_documents,
    document_detail,
    rename_document,
    upload_profile,
    patient_photo,
    patient_id_proof,
)
from .views.prescriptions import (
    list_prescriptions,
    patient_prescriptions,
    prescription_detail,
    prescription_pdf,
    prescription_download,
)
from .views.lab_reports import (
    list_lab_reports,
    patient_lab_reports,
    lab_report_detail,
    lab_report_pdf,
    lab_report_download,
)

urlpatterns = [
    # django_prometheus registers its own "metrics" path
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Nurses
    path('api/nurse/signup', signup_view, name='nurse_signup'),
    path('api/nurse/login', login_view, name='nurse_login'),
    path('api/nurse/refresh', refresh_view, name='nurse_refresh'),
    path('api/nurse/logout', logout_view, name='nurse_logout'),
    path('api/nurse/status/<int:pk>', status_view, name='nurse_status'),
    # Patients
    path('api/patient/register', patient_register, name='patient_register'),
    path('api/patient/list', list_patients, name='patient_list'),
    path('api/patient/visit', patient_add_visit, name='patient_add_visit'),
    path('api/visit/add', patient_add_visit, name='visit_add'),
    path('api/patient/upload/<int:pk>/documents', upload_documents, name='patient_upload_documents'),
    path('api/patient/upload/<int:pk>/profile', upload_profile, name='patient_upload_profile'),
    path('api/patient/<int:pk>', patient_detail, name='patient_detail'),
    path('api/patient/<int:pk>/deactivate', patient_deactivate, name='patient_deactivate'),
    path('api/patient/<int:pk>/visits', patient_visits, name='patient_visits'),
    path('api/patient/<int:pk>/documents', list_documents, name='patient_documents'),
    path('api/patient/<int:pk>/documents/<int:doc_pk>', document_detail, name='patient_document'),
    path('api/patient/<int:pk>/documents/<int:doc_pk>/rename', rename_document, name='patient_document_rename'),
    path('api/patient/<int:pk>/photo', patient_photo, name='patient_photo'),
    path('api/patient/<int:pk>/idproof', patient_id_proof, name='patient_id_proof'),
    # Prescriptions (read only, rendered on demand)
    path('api/prescriptions', list_prescriptions, name='prescription_list'),
    path('api/prescriptions/patient/<int:patient_pk>', patient_prescriptions, name='patient_prescriptions'),
    path('api/prescriptions/<int:pk>', prescription_detail, name='prescription_detail'),
    path('api/prescriptions/<int:pk>/pdf', prescription_pdf, name='prescription_pdf'),
    path('api/prescriptions/<int:pk>/get-pdf', prescription_download, name='prescription_download'),
    # Lab reports
    path('api/lab-reports', list_lab_reports, name='lab_report_list'),
    path('api/lab-reports/patient/<int:patient_pk>', patient_lab_reports, name='patient_lab_reports'),
    path('api/lab-reports/<int:pk>', lab_report_detail, name='lab_report_detail'),
    path('api/lab-reports/<int:pk>/pdf', lab_report_pdf, name='lab_report_pdf'),
    path('api/lab-reports/<int:pk>/get-pdf', lab_report_download, name='lab_report_download'),
]
