"""Built-in picklists seeded into every new company."""

DEFAULT_FIELD_OPTIONS = {
    "degree": ["Associate's", "Bachelor's", "Master's", "Doctorate"],
    "department": [
        "Engineering", "Finance", "Human Resources", "Information Technology",
        "Marketing", "Operations", "Sales",
    ],
    "division": ["Corporate", "North America", "Europe", "Asia"],
    "employmentStatus": ["Full-Time", "Part-Time", "Contract", "Intern", "Temporary", "Furloughed"],
    "jobTitle": [
        "Software Engineer", "Software Developer", "Accountant", "HR Specialist",
        "IT Specialist", "Marketing Specialist", "Operations Specialist", "Sales Specialist",
    ],
    "visaType": ["H-1B", "L-1", "F-1", "J-1", "Green Card", "Citizen"],
    "assetCategory": ["Laptop", "Desktop", "Monitor", "Phone", "Tablet", "Other"],
}

# Roles that must always exist
PROTECTED_ROLES = ("owner", "manager", "employee")
