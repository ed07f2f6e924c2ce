"""RFID Attendance package.

Feature modules (teachers, assignments, auth, students, attendance) each keep a
thin Flask controller on top of a service and a repository protocol with a
MySQL implementation.
"""
