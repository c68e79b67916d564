import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import nursing.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="Nurse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                ("nurse_id", models.CharField(editable=False, max_length=16, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=254, unique=True)),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("Head Nurse", "Head Nurse"),
                            ("Staff Nurse", "Staff Nurse"),
                            ("Junior Nurse", "Junior Nurse"),
                        ],
                        default="Staff Nurse",
                        max_length=20,
                    ),
                ),
                (
                    "department",
                    models.CharField(
                        choices=[
                            ("General Medicine", "General Medicine"),
                            ("Pediatrics", "Pediatrics"),
                            ("Surgery", "Surgery"),
                            ("Orthopedics", "Orthopedics"),
                            ("Cardiology", "Cardiology"),
                            ("Emergency", "Emergency"),
                            ("Neurology", "Neurology"),
                        ],
                        max_length=32,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("Active", "Active"), ("Inactive", "Inactive")],
                        db_index=True,
                        default="Active",
                        max_length=10,
                    ),
                ),
                ("is_staff", models.BooleanField(default=False)),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "abstract": False,
            },
            managers=[
                ("objects", nursing.models.NurseManager()),
            ],
        ),
        migrations.CreateModel(
            name="Patient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("patient_id", models.CharField(editable=False, max_length=20, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("age", models.PositiveIntegerField()),
                (
                    "gender",
                    models.CharField(
                        choices=[("Male", "Male"), ("Female", "Female"), ("Other", "Other")],
                        max_length=10,
                    ),
                ),
                ("contact", models.CharField(max_length=64)),
                ("emergency_contact", models.CharField(blank=True, max_length=64)),
                ("address", models.TextField(blank=True)),
                ("medical_history", models.TextField(blank=True, default="")),
                ("photo_handle", models.CharField(blank=True, max_length=32, null=True)),
                ("photo_content_type", models.CharField(blank=True, max_length=128)),
                ("photo_uploaded_at", models.DateTimeField(blank=True, null=True)),
                ("id_proof_handle", models.CharField(blank=True, max_length=32, null=True)),
                ("id_proof_content_type", models.CharField(blank=True, max_length=128)),
                ("id_proof_uploaded_at", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "id_proof_uploaded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "photo_uploaded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Visit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("weight", models.FloatField(help_text="kg")),
                ("height", models.FloatField(help_text="cm")),
                ("blood_pressure", models.CharField(max_length=20)),
                ("heart_rate", models.PositiveIntegerField()),
                ("temperature", models.FloatField()),
                ("chief_complaint", models.CharField(default="Regular checkup", max_length=255)),
                ("bmi", models.CharField(blank=True, max_length=10)),
                ("bmi_category", models.CharField(blank=True, max_length=20)),
                ("notes", models.TextField(blank=True)),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="visits",
                        to="nursing.patient",
                    ),
                ),
            ],
            options={
                "ordering": ["date", "id"],
            },
        ),
        migrations.CreateModel(
            name="PatientDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("content_type", models.CharField(max_length=128)),
                ("handle", models.CharField(max_length=32)),
                ("uploaded_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "patient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="documents",
                        to="nursing.patient",
                    ),
                ),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="uploaded_documents",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["uploaded_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="Prescription",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("prescription_id", models.CharField(max_length=64, unique=True)),
                ("doctor_id", models.CharField(max_length=64)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("diagnosis", models.TextField()),
                ("clinical_notes", models.TextField(blank=True)),
                ("special_instructions", models.TextField(blank=True)),
                ("follow_up", models.CharField(blank=True, max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "draft"), ("final", "final")],
                        db_index=True,
                        default="final",
                        max_length=10,
                    ),
                ),
                ("pdf_locator", models.CharField(blank=True, max_length=32, null=True)),
                ("pdf_filename", models.CharField(blank=True, max_length=255)),
                ("sequence_label", models.CharField(blank=True, max_length=10)),
                ("nurse_notes", models.TextField(blank=True)),
                (
                    "administration_status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("in-progress", "in-progress"),
                            ("completed", "completed"),
                            ("cancelled", "cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("administered_medications", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "nurse",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "patient",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="prescriptions",
                        to="nursing.patient",
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["patient", "date"], name="nursing_pre_patient_0b6c4e_idx")],
            },
        ),
        migrations.CreateModel(
            name="Medication",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveIntegerField(default=0)),
                ("medicine", models.CharField(max_length=255)),
                ("dosage", models.CharField(max_length=255)),
                ("duration", models.CharField(max_length=255)),
                ("notes", models.TextField(blank=True)),
                (
                    "prescription",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="medications",
                        to="nursing.prescription",
                    ),
                ),
            ],
            options={
                "ordering": ["position", "id"],
            },
        ),
        migrations.CreateModel(
            name="LabReport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("report_id", models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ("doctor_id", models.CharField(blank=True, max_length=64)),
                ("ordered_by", models.CharField(blank=True, max_length=64)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("test_type", models.CharField(blank=True, db_index=True, max_length=255)),
                ("name", models.CharField(blank=True, max_length=255)),
                ("test_results", models.TextField(blank=True)),
                ("normal_range", models.CharField(blank=True, max_length=255)),
                ("interpretation", models.TextField(blank=True)),
                ("recommendations", models.TextField(blank=True)),
                ("findings", models.TextField(blank=True)),
                ("instructions", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("completed", "completed"),
                            ("ordered", "ordered"),
                            ("in-progress", "in-progress"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("pdf_locator", models.CharField(blank=True, max_length=32, null=True)),
                ("pdf_filename", models.CharField(blank=True, max_length=255)),
                ("sequence_label", models.CharField(blank=True, max_length=10)),
                ("uploaded_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "patient",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="lab_reports",
                        to="nursing.patient",
                    ),
                ),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["patient", "date"], name="nursing_lab_patient_5f2a9d_idx")],
            },
        ),
        migrations.CreateModel(
            name="StoredBlob",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("bucket", models.CharField(db_index=True, max_length=64)),
                ("filename", models.CharField(max_length=255)),
                ("content_type", models.CharField(blank=True, max_length=128)),
                ("length", models.BigIntegerField(default=0)),
                ("chunk_size", models.PositiveIntegerField()),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("upload_date", models.DateTimeField(default=django.utils.timezone.now)),
            ],
        ),
        migrations.CreateModel(
            name="BlobChunk",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("n", models.PositiveIntegerField()),
                ("data", models.BinaryField()),
                (
                    "blob",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="chunks",
                        to="nursing.storedblob",
                    ),
                ),
            ],
            options={
                "ordering": ["n"],
                "constraints": [models.UniqueConstraint(fields=("blob", "n"), name="uniq_blob_chunk_n")],
            },
        ),
        migrations.CreateModel(
            name="SequenceCounter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("scope", models.CharField(max_length=64, unique=True)),
                ("value", models.PositiveBigIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="AuditEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=64)),
                ("object_type", models.CharField(blank=True, max_length=64, null=True)),
                ("object_id", models.CharField(blank=True, max_length=64, null=True)),
                ("detail", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "nurse",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["action", "created_at"], name="nursing_aud_action_3c1d7e_idx"),
                    models.Index(fields=["object_type", "object_id", "created_at"], name="nursing_aud_object__8e4b2f_idx"),
                ],
            },
        ),
    ]
