"""Demo doctor directory loaded into an empty database."""

import logging

from sqlalchemy.orm import Session

from medibook.models.doctor import Doctor

logger = logging.getLogger(__name__)

ALL_WEEK = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']
WEEKDAYS = ALL_WEEK[:5]

DEMO_DOCTORS = [
    {
        'id': 'demo',
        'name': 'Dr. Demo Always',
        'specialization': 'General Physician',
        'experience': '5 years',
        'rating': 5.0,
        'review_count': 999,
        'consultation_fee': 100,
        'location': 'Test Clinic, Everywhere',
        'working_days': ALL_WEEK,
        'working_hours': '9:00 AM - 6:00 PM',
        'languages': ['English'],
        'qualifications': ['MBBS'],
        'about': 'Demo doctor for testing. Available every day of the week.',
        'phone_number': '+91-9999999999',
        'email': 'demo@demo.com',
    },
    {
        'id': '1',
        'name': 'Dr. Prakash Das',
        'specialization': 'Psychologist',
        'experience': '8 years',
        'rating': 4.8,
        'review_count': 127,
        'consultation_fee': 500,
        'location': 'Apollo Hospital, Delhi',
        'working_days': ALL_WEEK[:6],
        'working_hours': '10:00 AM - 7:00 PM',
        'languages': ['English', 'Hindi'],
        'qualifications': ['MBBS', 'MD Psychology', 'PhD Clinical Psychology'],
        'about': 'Cognitive behavioural therapy, anxiety disorders and depression treatment.',
        'phone_number': '+91-9876543210',
        'email': 'dr.prakash@apollohospital.com',
    },
    {
        'id': '2',
        'name': 'Dr. Sarah Wilson',
        'specialization': 'Cardiologist',
        'experience': '12 years',
        'rating': 4.9,
        'review_count': 234,
        'consultation_fee': 800,
        'location': 'Max Healthcare, Mumbai',
        'working_days': WEEKDAYS,
        'working_hours': '11:00 AM - 6:00 PM',
        'languages': ['English', 'Hindi', 'Marathi'],
        'qualifications': ['MBBS', 'MD Cardiology', 'Fellowship in Interventional Cardiology'],
        'about': 'Interventional cardiology and heart disease prevention.',
        'phone_number': '+91-9876543211',
        'email': 'dr.sarah@maxhealthcare.com',
    },
    {
        'id': '3',
        'name': 'Dr. Michael Chen',
        'specialization': 'Dermatologist',
        'experience': '10 years',
        'rating': 4.7,
        'review_count': 189,
        'consultation_fee': 600,
        'location': 'Fortis Hospital, Bangalore',
        'working_days': ALL_WEEK[1:],
        'working_hours': '9:30 AM - 5:30 PM',
        'languages': ['English', 'Hindi', 'Kannada'],
        'qualifications': ['MBBS', 'MD Dermatology'],
        'about': 'Medical and cosmetic dermatology.',
        'phone_number': '+91-9876543212',
        'email': 'dr.michael@fortis.com',
    },
    {
        'id': '4',
        'name': 'Dr. Emily Rodriguez',
        'specialization': 'Pediatrician',
        'experience': '15 years',
        'rating': 4.9,
        'review_count': 312,
        'consultation_fee': 450,
        'location': 'AIIMS, New Delhi',
        'working_days': WEEKDAYS,
        'working_hours': '8:00 AM - 4:00 PM',
        'languages': ['English', 'Hindi', 'Spanish'],
        'qualifications': ['MBBS', 'MD Pediatrics'],
        'about': 'Paediatric care with a special interest in paediatric cardiology.',
        'phone_number': '+91-9876543213',
        'email': 'dr.emily@aiims.edu',
    },
    {
        'id': '5',
        'name': 'Dr. James Park',
        'specialization': 'Orthopedic',
        'experience': '18 years',
        'rating': 4.8,
        'review_count': 267,
        'consultation_fee': 750,
        'location': 'Bone & Joint Clinic, Pune',
        'working_days': ['Monday', 'Wednesday', 'Thursday', 'Friday', 'Saturday'],
        'working_hours': '10:00 AM - 6:00 PM',
        'languages': ['English', 'Hindi', 'Marathi'],
        'qualifications': ['MBBS', 'MS Orthopedics'],
        'about': 'Joint replacement and sports medicine.',
        'phone_number': '+91-9876543214',
        'email': 'dr.james@bonejoint.com',
        'is_available': False,
    },
]


def seed_demo_doctors(db: Session) -> int:
    if db.query(Doctor).first() is not None:
        return 0

    for doctor_data in DEMO_DOCTORS:
        db.add(Doctor(**doctor_data))
    db.commit()

    logger.info('Seeded %d demo doctors', len(DEMO_DOCTORS))
    return len(DEMO_DOCTORS)
