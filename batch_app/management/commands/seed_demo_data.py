from datetime import timedelta
from decimal import Decimal

from django.contrib.auth.hashers import make_password
from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts.models import AdminProfile
from attendance_app.models import AttendanceRecord, AttendanceSession
from batch_app.models import Batch, BatchStudent
from leaderboard_app.models import ActivenessBoard, InterviewRound, Leaderboard, ModuleScore


class Command(BaseCommand):
    help = "Seed demo data: an admin, batches with rosters, a week of sessions and two boards."

    def add_arguments(self, parser):
        parser.add_argument("--batches", type=int, default=2)
        parser.add_argument("--students-per-batch", type=int, default=12)
        parser.add_argument("--days", type=int, default=7)
        parser.add_argument("--email", type=str, default="admin@example.com")
        parser.add_argument("--password", type=str, default="Pass@123")

    @transaction.atomic
    def handle(self, *args, **options):
        batches_count = options["batches"]
        students_per_batch = options["students_per_batch"]
        days = options["days"]
        email = options["email"].strip().lower()

        modules_pool = [
            "Python Basics",
            "Data Structures",
            "SQL",
            "Web APIs",
            "Git Workflow",
        ]

        self.stdout.write("Seeding admin account...")
        user, _ = User.objects.update_or_create(
            username=email,
            defaults={"email": email, "password": make_password(options["password"])},
        )
        AdminProfile.objects.update_or_create(
            user=user,
            defaults={"name": "Demo Admin", "role": AdminProfile.ROLE_ADMIN},
        )

        self.stdout.write("Seeding batches and rosters...")
        batches = []
        for i in range(1, batches_count + 1):
            batch, _ = Batch.objects.get_or_create(
                name=f"Demo Batch {i:02d}",
                defaults={
                    "description": f"Demo cohort number {i}",
                    "is_active": True,
                    "created_by": user,
                },
            )
            for j in range(1, students_per_batch + 1):
                BatchStudent.objects.update_or_create(
                    batch=batch,
                    student_name=f"Student B{i:02d}-{j:02d}",
                    defaults={"student_email": f"student.b{i:02d}.{j:02d}@example.com"},
                )
            batches.append(batch)

        self.stdout.write("Seeding attendance sessions...")
        today = timezone.localdate()
        created_records = 0
        for batch in batches:
            roster = list(batch.students.values_list("student_name", flat=True))
            for offset in range(days - 1, -1, -1):
                session_date = today - timedelta(days=offset)
                session, _ = AttendanceSession.objects.get_or_create(
                    batch=batch,
                    session_date=session_date,
                    defaults={"is_active": True, "created_by": user},
                )
                # Every third student skips a day, rotating with the date.
                for index, name in enumerate(roster):
                    if (index + offset) % 3 == 0:
                        continue
                    _, created = AttendanceRecord.objects.get_or_create(session=session, student_name=name)
                    created_records += created

        self.stdout.write("Seeding boards...")
        leaderboard, _ = Leaderboard.objects.get_or_create(
            name="Demo Interviews",
            defaults={"description": "Mock interview scores", "created_by": user},
        )
        activeness, _ = ActivenessBoard.objects.get_or_create(
            name="Demo Activeness",
            defaults={"description": "Module participation", "created_by": user},
        )
        roster = list(batches[0].students.values_list("student_name", flat=True)) if batches else []
        for index, name in enumerate(roster):
            InterviewRound.objects.update_or_create(
                leaderboard=leaderboard,
                student_name=name,
                round_number=1,
                defaults={
                    "score": 45 + (index * 7) % 55,
                    "interviewer_name": "Demo Interviewer",
                    "interview_date": today,
                },
            )
            module_name = modules_pool[index % len(modules_pool)]
            ModuleScore.objects.update_or_create(
                board=activeness,
                student_name=name,
                module_name=module_name,
                defaults={"score": Decimal(30 + (index * 13) % 71) / 10},
            )

        self.stdout.write(self.style.SUCCESS("Demo dataset ready."))
        self.stdout.write(
            self.style.SUCCESS(
                f"Login: {email}, Batches: {len(batches)}, "
                f"Students: {len(batches) * students_per_batch}, Records: {created_records}"
            )
        )
