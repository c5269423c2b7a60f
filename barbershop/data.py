# barbershop/data.py

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

DEFAULT_SHOP_HOURS = {
    "monday": {"open": "09:00", "close": "18:00", "closed": False},
    "tuesday": {"open": "09:00", "close": "18:00", "closed": False},
    "wednesday": {"open": "09:00", "close": "18:00", "closed": False},
    "thursday": {"open": "09:00", "close": "18:00", "closed": False},
    "friday": {"open": "09:00", "close": "18:00", "closed": False},
    "saturday": {"open": "09:00", "close": "17:00", "closed": False},
    "sunday": {"open": "10:00", "close": "16:00", "closed": True},
}

# Predefined services shop owners can pick from
SERVICE_TEMPLATES = {
    "Hair": [
        {"name": "Regular Haircut", "description": "Basic haircut and styling", "default_duration": 30},
        {"name": "Premium Haircut", "description": "Detailed haircut with wash and style", "default_duration": 45},
        {"name": "Hair Wash", "description": "Shampoo and conditioning", "default_duration": 15},
        {"name": "Hair Styling", "description": "Professional hair styling", "default_duration": 20},
        {"name": "Hair Coloring", "description": "Hair color treatment", "default_duration": 90},
        {"name": "Highlights", "description": "Hair highlighting service", "default_duration": 120},
    ],
    "Beard": [
        {"name": "Beard Trim", "description": "Beard trimming and shaping", "default_duration": 20},
        {"name": "Beard Styling", "description": "Complete beard grooming and styling", "default_duration": 30},
        {"name": "Mustache Trim", "description": "Mustache trimming service", "default_duration": 10},
        {"name": "Beard Oil Treatment", "description": "Nourishing beard oil application", "default_duration": 15},
    ],
    "Styling": [
        {"name": "Hair Setting", "description": "Professional hair setting", "default_duration": 25},
        {"name": "Blow Dry", "description": "Hair blow drying service", "default_duration": 20},
        {"name": "Straightening", "description": "Hair straightening treatment", "default_duration": 60},
        {"name": "Curling", "description": "Hair curling service", "default_duration": 30},
    ],
    "Treatment": [
        {"name": "Head Massage", "description": "Relaxing head massage", "default_duration": 20},
        {"name": "Hair Spa", "description": "Complete hair spa treatment", "default_duration": 90},
        {"name": "Scalp Treatment", "description": "Specialized scalp care", "default_duration": 45},
        {"name": "Hot Towel Treatment", "description": "Relaxing hot towel service", "default_duration": 15},
    ],
    "Package": [
        {"name": "Full Service Package", "description": "Haircut + Beard + Styling", "default_duration": 75},
        {"name": "Grooming Package", "description": "Haircut + Wash + Styling", "default_duration": 60},
        {"name": "Premium Package", "description": "All services included", "default_duration": 120},
        {"name": "Quick Package", "description": "Haircut + Beard trim", "default_duration": 45},
    ],
}

DEFAULT_SPECIALTIES = [
    {"name": "Hair Cut", "description": "Professional hair cutting and styling", "icon": "✂️"},
    {"name": "Beard Trim", "description": "Beard trimming and shaping", "icon": "🧔"},
    {"name": "Shave", "description": "Traditional wet shave service", "icon": "🪒"},
    {"name": "Hair Styling", "description": "Hair styling and grooming", "icon": "💇"},
    {"name": "Hair Coloring", "description": "Hair coloring and highlighting", "icon": "🎨"},
    {"name": "Facial", "description": "Facial treatment and skincare", "icon": "😊"},
]
