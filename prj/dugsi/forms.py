"""
dugsi/forms.py
──────────────
Turns dashboard query parameters (?tab=...&q=...&date_filter=...) into a
FilterSpec for the family pipeline.
"""

from django import forms

from .types import AdvancedFilters, DateFilter, FilterSpec, ShiftFilter, SortOrder, Tab


def _blank(choices, label):
    return [('', label)] + list(choices)


class FamilyFilterForm(forms.Form):
    """
    Filter bar + advanced filter panel of the family dashboard.

    Pass ``options`` (the dict from dugsi.filters.filter_options) to restrict
    the school and grade pickers to values that actually occur.
    """

    tab = forms.ChoiceField(
        choices=_blank(Tab.choices, 'All'), required=False, label='Tab',
    )
    q = forms.CharField(
        required=False, max_length=200, label='Search',
        widget=forms.TextInput(attrs={'placeholder': 'Search by name, phone, or email…'}),
    )
    date_filter = forms.ChoiceField(
        choices=DateFilter.choices, required=False, label='Date',
    )
    date_from = forms.DateField(
        required=False, label='From',
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        input_formats=['%Y-%m-%d'],
    )
    date_to = forms.DateField(
        required=False, label='To',
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        input_formats=['%Y-%m-%d'],
    )
    has_health_info = forms.BooleanField(required=False, label='Has health info')
    school = forms.MultipleChoiceField(required=False, label='School')
    grade = forms.MultipleChoiceField(required=False, label='Grade')
    shift = forms.ChoiceField(choices=ShiftFilter.choices, required=False, label='Shift')
    quick_shift = forms.ChoiceField(
        choices=_blank(ShiftFilter.choices, 'Any'), required=False, label='Quick shift',
    )
    sort = forms.ChoiceField(
        choices=_blank(SortOrder.choices, 'As registered'), required=False, label='Sort',
    )

    def __init__(self, *args, **kwargs):
        options = kwargs.pop('options', None)
        super().__init__(*args, **kwargs)
        if options is not None:
            schools = options.get('schools', [])
            grades  = options.get('grades', [])
        else:
            schools = self._submitted('school')
            grades  = self._submitted('grade')
        self.fields['school'].choices = [(s, s) for s in schools]
        self.fields['grade'].choices  = [(g, g) for g in grades]

    def _submitted(self, name):
        if hasattr(self.data, 'getlist'):
            return self.data.getlist(name)
        value = self.data.get(name) if self.data else None
        if value is None:
            return []
        return list(value) if isinstance(value, (list, tuple)) else [value]

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get('date_from'), cleaned.get('date_to')
        if start and end and start > end:
            raise forms.ValidationError('"From" date must be on or before the "To" date.')
        return cleaned

    def to_filter_spec(self):
        """
        Build a FilterSpec from the cleaned data.  An unbound form gives the
        default (unfiltered) spec; an invalid one raises ValueError.
        """
        if not self.is_bound:
            return FilterSpec()
        if not self.is_valid():
            raise ValueError(f'Cannot build filters from invalid input: {self.errors.as_json()}')

        data = self.cleaned_data
        start, end = data.get('date_from'), data.get('date_to')

        advanced = AdvancedFilters(
            date_filter=data.get('date_filter') or DateFilter.ALL,
            date_range=(start, end) if (start or end) else None,
            has_health_info=bool(data.get('has_health_info')),
            schools=frozenset(data.get('school') or ()),
            grades=frozenset(data.get('grade') or ()),
            shift=data.get('shift') or ShiftFilter.ALL,
        )
        return FilterSpec(
            tab=data.get('tab') or Tab.ALL,
            search_query=data.get('q') or '',
            advanced=advanced,
            quick_shift=data.get('quick_shift') or None,
        )

    @property
    def sort_order(self):
        if self.is_bound and self.is_valid():
            return self.cleaned_data.get('sort') or None
        return None
