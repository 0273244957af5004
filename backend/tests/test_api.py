from datetime import date

from attendance.reports import CSV_HEADER
from tests.base import AppTestCase, at

STUDENT = {"nis": "2023001", "name": "Ahmad Fauzi", "class": "X-1", "gender": "L", "birthDate": "2008-03-14"}


class AuthApiTests(AppTestCase):
    def test_login_me_logout(self):
        response = self.login("teacher")
        self.assertEqual(response.get_json()["user"]["role"], "teacher")

        me = self.client.get("/auth/me")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.get_json()["user"]["username"], "teacher")

        self.assertEqual(self.client.post("/auth/logout").status_code, 200)
        self.assertEqual(self.client.get("/auth/me").status_code, 401)

    def test_bad_credentials(self):
        response = self.client.post("/auth/login", json={"username": "admin", "password": "wrong"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()["error"], "Invalid credentials")

    def test_malformed_login_is_a_validation_error(self):
        response = self.client.post("/auth/login", json={"username": "admin"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["errors"][0]["field"], "password")

    def test_read_endpoints_require_a_session(self):
        for path in ("/students/list", "/attendance/list", "/dashboard/stats", "/reports/attendance",
                     "/reports/export/attendance-csv"):
            response = self.client.get(path)
            self.assertEqual(response.status_code, 401, path)
            self.assertIn("error", response.get_json())


class StudentApiTests(AppTestCase):
    def test_admin_creates_and_teacher_scans(self):
        self.login("admin")
        response = self.client.post("/students/create", json=STUDENT)
        self.assertEqual(response.status_code, 201, response.get_json())
        created = response.get_json()
        self.assertEqual(created["qr_code"], "STD_2023001")
        self.assertEqual(created["birth_date"], "2008-03-14")

        self.login("teacher")
        response = self.client.post("/students/search-by-qr", json={"qrCode": "STD_2023001"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["id"], created["id"])

        response = self.client.post("/students/search-by-qr", json={"qrCode": "STD_0000"})
        self.assertEqual(response.status_code, 404)

    def test_teacher_cannot_mutate_roster(self):
        student = self.make_student("2023001", "Ahmad Fauzi")
        self.login("teacher")

        self.assertEqual(self.client.post("/students/create", json=STUDENT).status_code, 403)
        self.assertEqual(self.client.put(f"/students/update/{student.id}", json={"name": "X"}).status_code, 403)
        self.assertEqual(self.client.delete(f"/students/remove/{student.id}").status_code, 403)

    def test_duplicate_nis_and_validation_errors(self):
        self.login("admin")
        self.client.post("/students/create", json=STUDENT)

        duplicate = self.client.post("/students/create", json=STUDENT)
        self.assertEqual(duplicate.status_code, 409)
        self.assertEqual(duplicate.get_json()["error"], "NIS already exists")

        invalid = self.client.post("/students/create", json={"nis": "2023002"})
        self.assertEqual(invalid.status_code, 400)
        body = invalid.get_json()
        self.assertEqual(body["error"], "Invalid student data")
        self.assertTrue({"name", "class", "gender"} <= {e["field"] for e in body["errors"]})

    def test_list_filters_and_pagination(self):
        self.make_student("2023001", "Siti Aminah", "X-1")
        self.make_student("2023002", "Ahmad Fauzi", "X-2")
        self.make_student("2023003", "Budi Santoso", "X-1", is_active=False)
        self.login("teacher")

        names = [s["name"] for s in self.client.get("/students/list").get_json()]
        self.assertEqual(names, ["Ahmad Fauzi", "Budi Santoso", "Siti Aminah"])

        filtered = self.client.get("/students/list?class=X-1&isActive=true").get_json()
        self.assertEqual([s["name"] for s in filtered], ["Siti Aminah"])

        page = self.client.get("/students/list?page=2&per_page=2").get_json()
        self.assertEqual((page["total"], page["pages"], page["page"]), (3, 2, 2))
        self.assertEqual([s["name"] for s in page["students"]], ["Siti Aminah"])

        self.assertEqual(self.client.get("/students/classes").get_json(), ["X-1", "X-2"])

    def test_remove_is_a_soft_delete(self):
        student = self.make_student("2023001", "Ahmad Fauzi")
        self.make_record(student, "present", at(2025, 1, 6))
        self.login("admin")

        response = self.client.delete(f"/students/remove/{student.id}")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.get_json()["student"]["is_active"])

        self.assertEqual(self.client.get(f"/students/{student.id}").get_json()["is_active"], False)
        self.assertEqual(len(self.client.get(f"/attendance/list?studentId={student.id}").get_json()), 1)

        restored = self.client.post(f"/students/restore/{student.id}")
        self.assertTrue(restored.get_json()["student"]["is_active"])

    def test_qr_png_and_form_schema(self):
        student = self.make_student("2023001", "Ahmad Fauzi")
        self.login("teacher")

        response = self.client.get(f"/students/{student.id}/qr?download=true")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, "image/png")
        self.assertTrue(response.data.startswith(b"\x89PNG"))
        self.assertIn("QR_2023001_Ahmad_Fauzi.png", response.headers["Content-Disposition"])

        fields = {f["name"]: f for f in self.client.get("/students/form_schema").get_json()["fields"]}
        self.assertNotIn("qr_code", fields)
        self.assertEqual([o["value"] for o in fields["gender"]["options"]], ["L", "P"])

    def test_unknown_student_is_404(self):
        self.login("teacher")
        response = self.client.get("/students/999")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()["error"], "Student not found")


class AttendanceApiTests(AppTestCase):
    def setUp(self):
        super().setUp()
        self.siti = self.make_student("2023001", "Siti Aminah", "X-1")
        self.ahmad = self.make_student("2023002", "Ahmad Fauzi", "X-2")

    def test_record_and_update(self):
        self.login("teacher")
        response = self.client.post("/attendance/record", json={"studentId": self.siti.id, "status": "present"})
        self.assertEqual(response.status_code, 201, response.get_json())
        record = response.get_json()
        self.assertEqual(record["date"], date.today().isoformat())
        self.assertEqual(record["recorded_by"], self.teacher.id)

        response = self.client.put(f"/attendance/update/{record['id']}", json={"status": "late", "notes": "macet"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["status"], "late")

        self.assertEqual(self.client.get(f"/attendance/{record['id']}").get_json()["notes"], "macet")

    def test_invalid_record_payload(self):
        self.login("teacher")
        response = self.client.post("/attendance/record", json={"status": "present"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["errors"][0]["field"], "student_id")

    def test_list_filters(self):
        self.make_record(self.siti, "present", at(2025, 1, 6, 7))
        self.make_record(self.siti, "late", at(2025, 1, 7, 8))
        self.make_record(self.ahmad, "sick", at(2025, 1, 7, 9))
        self.login("teacher")

        def statuses(query):
            response = self.client.get(f"/attendance/list{query}")
            self.assertEqual(response.status_code, 200, response.get_json())
            return [r["status"] for r in response.get_json()]

        self.assertEqual(statuses(""), ["sick", "late", "present"])
        self.assertEqual(statuses("?date=2025-01-07"), ["sick", "late"])
        self.assertEqual(statuses("?date=2025-01-07&class=X-1"), ["late"])
        self.assertEqual(statuses("?startDate=2025-01-06&endDate=2025-01-06"), ["present"])
        self.assertEqual(statuses(f"?student_id={self.ahmad.id}&status=sick"), ["sick"])

    def test_bad_filter_values_are_rejected(self):
        self.login("teacher")
        response = self.client.get("/attendance/list?date=06-01-2025")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["errors"][0]["field"], "date")
        self.assertEqual(self.client.get("/attendance/list?status=bolos").status_code, 400)


class DashboardAndReportApiTests(AppTestCase):
    def setUp(self):
        super().setUp()
        self.siti = self.make_student("2023001", "Siti Aminah", "X-1")
        self.ahmad = self.make_student("2023002", "Ahmad Fauzi", "X-1")
        self.budi = self.make_student("2023003", "Budi Santoso", "X-1", is_active=False)

        self.make_record(self.siti, "present", at(2025, 1, 6, 7, 0))
        self.make_record(self.siti, "present", at(2025, 1, 6, 7, 2))
        self.make_record(self.siti, "late", at(2025, 1, 6, 8, 0))
        self.make_record(self.budi, "absent", at(2025, 1, 6, 8, 0))
        self.login("teacher")

    def test_daily_stats(self):
        stats = self.client.get("/dashboard/stats?date=2025-01-06").get_json()
        self.assertEqual(stats["totalStudents"], 2)
        self.assertEqual(stats["presentToday"], 2)
        self.assertEqual(stats["lateToday"], 1)
        self.assertEqual(stats["absentToday"], 1)
        self.assertEqual(stats["sickToday"], 0)
        self.assertEqual(stats["permissionToday"], 0)

        empty = self.client.get("/dashboard/stats?date=2025-02-01").get_json()
        self.assertEqual(empty["totalStudents"], 2)
        self.assertEqual(empty["presentToday"] + empty["lateToday"] + empty["absentToday"], 0)

    def test_timestamps_in_day_parameters_are_truncated_to_the_date(self):
        expected = self.client.get("/dashboard/stats?date=2025-01-06").get_json()
        for value in ("2025-01-06T15:30:00", "2025-01-06T00:00:00.000Z", "2025-01-06%2023:59:59"):
            response = self.client.get(f"/dashboard/stats?date={value}")
            self.assertEqual(response.status_code, 200, response.get_json())
            self.assertEqual(response.get_json(), expected)

        rows = self.client.get("/reports/attendance?startDate=2025-01-06T09:00:00&endDate=2025-01-06T06:00:00").get_json()
        by_nis = {row["student"]["nis"]: row for row in rows}
        self.assertEqual(by_nis["2023001"]["totalDays"], 3)

        self.assertEqual(self.client.get("/dashboard/stats?date=2025-01-06Tnoon").status_code, 400)

    def test_report_includes_zero_rows_and_excludes_inactive(self):
        rows = self.client.get("/reports/attendance?startDate=2025-01-01&endDate=2025-01-31&class=X-1").get_json()
        by_nis = {row["student"]["nis"]: row for row in rows}

        self.assertEqual(set(by_nis), {"2023001", "2023002"})
        self.assertEqual((by_nis["2023001"]["present"], by_nis["2023001"]["late"]), (2, 1))
        self.assertEqual(by_nis["2023001"]["percentage"], 100.0)
        self.assertEqual(by_nis["2023002"]["percentage"], 0)

        summary = self.client.get("/reports/attendance/summary?class=X-1").get_json()
        self.assertEqual(summary["averagePercentage"], 50.0)
        self.assertEqual(summary["belowThreshold"], 1)
        self.assertEqual(summary["totalLate"], 1)

    def test_csv_export(self):
        response = self.client.get("/reports/export/attendance-csv?startDate=2025-01-06&class=X-1&status=late")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, "text/csv")
        self.assertIn("attachment; filename=attendance-report.csv", response.headers["Content-Disposition"])

        self.assertEqual(
            response.get_data(as_text=True),
            ",".join(CSV_HEADER) + "\n" + '6/1/2025,08.00.00,"Siti Aminah",2023001,"X-1",late,""'
        )

    def test_csv_export_without_matches_is_header_only(self):
        response = self.client.get("/reports/export/attendance-csv?date=2030-01-01")
        self.assertEqual(response.get_data(as_text=True).splitlines(), [",".join(CSV_HEADER)])
