"""
api/sample_questions.py — built-in demo document for /api/start-sample
"""

SAMPLE_DOCUMENT = {
    "title": "Python Basics",
    "shuffleQuestions": True,
    "timeLimitSec": 300,
    "passThreshold": 0.6,
    "questions": [
        {
            "id": "py-1",
            "text": "Which keyword defines a function?",
            "options": ["func", "def", "lambda", "fn"],
            "correctIndex": 1,
        },
        {
            "id": "py-2",
            "text": "What does len([1, 2, 3]) return?",
            "options": ["2", "3", "4", "An error"],
            "correctIndex": 1,
        },
        {
            "id": "py-3",
            "text": "Which type is immutable?",
            "options": ["list", "dict", "set", "tuple"],
            "correctIndex": 3,
        },
        {
            "id": "py-4",
            "text": "What is the result of 7 // 2?",
            "options": ["3", "3.5", "4", "2"],
            "correctIndex": 0,
        },
        {
            "id": "py-5",
            "text": "Which statement handles exceptions?",
            "options": ["try/except", "if/else", "for/else", "with"],
            "correctIndex": 0,
        },
    ],
}
