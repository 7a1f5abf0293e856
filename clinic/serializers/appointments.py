"""
Appointment form serializer.

The booking form is split into three steps; ``AppointmentSerializer``
accepts ``only=<field names>`` so the same rules validate one step at a
time or the whole form at once.
"""
from __future__ import annotations

from datetime import date

import bleach
from rest_framework import serializers

OWNERSHIP_OPTIONS = ['leashed', 'unleashed', 'owned', 'stray', 'neighbor']
SEX_CHOICES = ['Male', 'Female', 'Other']
CIVIL_STATUS_CHOICES = ['Single', 'Married', 'Widowed', 'Separated']
CATEGORY_CHOICES = ['I', 'II', 'III']
ANIMAL_CHOICES = ['dog', 'cat', 'venomous_snake', 'other']
ANIMAL_STATE_CHOICES = ['healthy', 'sick', 'died', 'killed', 'unknown']
VACCINATED_BY_CHOICES = ['barangay', 'doh', 'other']

CATEGORY_DESCRIPTIONS = {
    'I': 'Touching or feeding animals, licks on intact skin.',
    'II': 'Nibbling of uncovered skin, minor scratches or abrasions without bleeding.',
    'III': 'Single or multiple transdermal bites or scratches, licks on broken skin, exposure to bats.',
}

STEPS = [
    {
        'title': 'Personal Details',
        'fields': ['full_name', 'address', 'birthday', 'age', 'sex', 'civil_status', 'contact_number',
                   'date_of_bite', 'time_of_bite', 'bite_address'],
        'required': ['full_name', 'address', 'birthday', 'age', 'sex', 'civil_status', 'contact_number',
                     'date_of_bite', 'time_of_bite', 'bite_address'],
    },
    {
        'title': 'Animal Bite Details',
        'fields': ['category', 'animal', 'animal_other', 'ownership', 'animal_state',
                   'animal_vaccinated_12mo', 'vaccinated_by', 'vaccinated_by_other'],
        'required': ['category', 'animal', 'ownership', 'animal_state'],
    },
    {
        'title': 'Wound Management',
        'fields': ['wound_washed', 'wound_antiseptic', 'wound_herbal', 'wound_antibiotics', 'wound_other',
                   'allergies_food', 'allergies_drugs', 'allergies_other', 'site_of_bite'],
        'required': ['site_of_bite'],
    },
]

TEXT_FIELDS = ('full_name', 'address', 'contact_number', 'bite_address', 'animal_other', 'vaccinated_by_other',
               'wound_herbal', 'wound_antibiotics', 'wound_other', 'allergies_other', 'site_of_bite')


def _msgs(message: str) -> dict:
    return {key: message for key in ('required', 'blank', 'null', 'invalid', 'invalid_choice', 'empty')}


def compute_age(birthday: date, today: date | None = None) -> int:
    """Full years between ``birthday`` and ``today``, never negative."""
    today = today or date.today()
    years = today.year - birthday.year - ((today.month, today.day) < (birthday.month, birthday.day))
    return max(0, years)


def _optional_text():
    return serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AppointmentSerializer(serializers.Serializer):
    # Personal details
    full_name = serializers.CharField(max_length=255, error_messages=_msgs('Full name is required'))
    address = serializers.CharField(error_messages=_msgs('Address is required'))
    birthday = serializers.DateField(error_messages=_msgs('Birthday is required'))
    age = serializers.IntegerField(
        required=False, allow_null=True,
        error_messages={**_msgs('Age is required'),
                        'min_value': 'Age must be a valid number', 'max_value': 'Age must be realistic'},
        min_value=0, max_value=120,
    )
    sex = serializers.ChoiceField(choices=SEX_CHOICES, error_messages=_msgs('Select sex'))
    civil_status = serializers.ChoiceField(choices=CIVIL_STATUS_CHOICES, error_messages=_msgs('Select civil status'))
    contact_number = serializers.CharField(
        min_length=5, max_length=32,
        error_messages={**_msgs('Valid contact number required'), 'min_length': 'Valid contact number required'},
    )
    date_of_bite = serializers.DateField(error_messages=_msgs('Date bitten is required'))
    bite_address = serializers.CharField(error_messages=_msgs('Bite address is required'))
    time_of_bite = serializers.TimeField(error_messages=_msgs('Time of bite is required'))

    # Animal bite details
    category = serializers.ChoiceField(choices=CATEGORY_CHOICES, error_messages=_msgs('Select a category'))
    animal = serializers.ChoiceField(choices=ANIMAL_CHOICES, error_messages=_msgs('Select an animal'))
    animal_other = _optional_text()
    ownership = serializers.ListField(
        child=serializers.ChoiceField(choices=OWNERSHIP_OPTIONS),
        allow_empty=False,
        error_messages=_msgs('Select at least one ownership option'),
    )
    animal_state = serializers.ChoiceField(choices=ANIMAL_STATE_CHOICES, error_messages=_msgs('Select animal status'))
    animal_vaccinated_12mo = serializers.BooleanField(required=False, default=False)
    vaccinated_by = serializers.ChoiceField(
        choices=VACCINATED_BY_CHOICES, required=False, allow_null=True, allow_blank=True,
    )
    vaccinated_by_other = _optional_text()

    # Wound management
    wound_washed = serializers.BooleanField(required=False, default=False)
    wound_antiseptic = serializers.BooleanField(required=False, default=False)
    wound_herbal = _optional_text()
    wound_antibiotics = _optional_text()
    wound_other = _optional_text()

    # Allergies & site of bite
    allergies_food = serializers.BooleanField(required=False, default=False)
    allergies_drugs = serializers.BooleanField(required=False, default=False)
    allergies_other = _optional_text()
    site_of_bite = serializers.CharField(error_messages=_msgs('Please describe the site of bite'))

    def __init__(self, *args, only=None, **kwargs):
        super().__init__(*args, **kwargs)
        if only is not None:
            for name in list(self.fields):
                if name not in only:
                    self.fields.pop(name)

    def to_internal_value(self, data):
        values = super().to_internal_value(data)
        for name in TEXT_FIELDS:
            if isinstance(values.get(name), str):
                values[name] = bleach.clean(values[name].strip(), strip=True)
        return values

    def validate(self, attrs):
        errors = {}
        fields = self.fields

        if 'age' in fields:
            if attrs.get('birthday'):
                attrs['age'] = compute_age(attrs['birthday'])
            elif attrs.get('age') is None:
                errors['age'] = ['Age is required']

        if 'animal' in fields:
            if attrs.get('animal') == 'other':
                if not (attrs.get('animal_other') or '').strip():
                    errors['animal_other'] = ['Please specify the animal']
            else:
                attrs['animal_other'] = None

        if 'animal_vaccinated_12mo' in fields:
            if attrs.get('animal_vaccinated_12mo'):
                if not attrs.get('vaccinated_by'):
                    errors['vaccinated_by'] = ['Please select who vaccinated the animal']
                elif attrs['vaccinated_by'] == 'other' and not (attrs.get('vaccinated_by_other') or '').strip():
                    errors['vaccinated_by_other'] = ['Please specify who vaccinated the animal']
                if attrs.get('vaccinated_by') != 'other':
                    attrs['vaccinated_by_other'] = None
            else:
                attrs['vaccinated_by'] = None
                attrs['vaccinated_by_other'] = None

        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class StepValidateSerializer(serializers.Serializer):
    step = serializers.IntegerField(min_value=0, max_value=len(STEPS) - 1)
    values = serializers.DictField()


def validate_step(step: int, values: dict) -> dict:
    """Return ``{field: [messages]}`` for the fields of one form step."""
    s = AppointmentSerializer(data=values, only=STEPS[step]['fields'])
    if s.is_valid():
        return {}
    return {k: [str(m) for m in v] if isinstance(v, list) else v for k, v in s.errors.items()}


def steps_payload() -> dict:
    return {
        'steps': [{'index': i, **step} for i, step in enumerate(STEPS)],
        'choices': {
            'sex': SEX_CHOICES,
            'civilStatus': CIVIL_STATUS_CHOICES,
            'category': [{'value': c, 'description': CATEGORY_DESCRIPTIONS[c]} for c in CATEGORY_CHOICES],
            'animal': ANIMAL_CHOICES,
            'animalState': ANIMAL_STATE_CHOICES,
            'ownership': OWNERSHIP_OPTIONS,
            'vaccinatedBy': VACCINATED_BY_CHOICES,
        },
    }
