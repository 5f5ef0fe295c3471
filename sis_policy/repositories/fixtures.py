"""
Demo dataset for local evaluation.

Two teachers, two parents and four students, with a handful of
assignments, attendance records and grades in different lifecycle states.
"""

from .memory import Dataset


def default_dataset() -> Dataset:
    """Return a fresh copy of the demo dataset."""
    return Dataset(
        assignments={
            "assign1": {"teacher_id": "teacher1", "student_id": "student1", "status": "assigned"},
            "assign2": {"teacher_id": "teacher1", "student_id": "student2", "status": "submitted"},
            "assign3": {"teacher_id": "teacher2", "student_id": "student3", "status": "graded"},
        },
        attendance={
            "att1": {
                "student_id": "student1",
                "class_id": "class1",
                "teacher_id": "teacher1",
                "date": "2024-01-15",
                "status": "present",
            },
            "att2": {
                "student_id": "student2",
                "class_id": "class1",
                "teacher_id": "teacher1",
                "date": "2024-01-15",
                "status": "absent",
            },
            "att3": {
                "student_id": "student3",
                "class_id": "class3",
                "teacher_id": "teacher2",
                "date": "2024-01-15",
                "status": "late",
            },
        },
        grades={
            "grade1": {
                "student_id": "student1",
                "assignment_id": "assign1",
                "teacher_id": "teacher1",
                "score": 85,
                "status": "finalized",
            },
            "grade2": {
                "student_id": "student2",
                "assignment_id": "assign2",
                "teacher_id": "teacher1",
                "score": 92,
                "status": "draft",
            },
            "grade3": {
                "student_id": "student3",
                "assignment_id": "assign3",
                "teacher_id": "teacher2",
                "score": 78,
                "status": "finalized",
            },
        },
        students={
            "student1": {"name": "Ada Lovelace", "class_id": "class1"},
            "student2": {"name": "Alan Turing", "class_id": "class1"},
            "student3": {"name": "Grace Hopper", "class_id": "class3"},
            "student4": {"name": "Edsger Dijkstra", "class_id": "class4"},
        },
        teacher_classes={
            "teacher1": {"class1", "class2"},
            "teacher2": {"class3", "class4"},
        },
        teacher_students={
            "teacher1": {"student1", "student2"},
            "teacher2": {"student3", "student4"},
        },
        parent_children={
            "parent1": {"student1", "student2"},
            "parent2": {"student3"},
        },
    )
