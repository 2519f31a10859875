# products/forms.py
from django import forms
from django.conf import settings

from .models import Product


class MultipleImageInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleImageField(forms.ImageField):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault("widget", MultipleImageInput(attrs={'accept': 'image/*'}))
        super().__init__(*args, **kwargs)

    def clean(self, data, initial=None):
        single_file_clean = super().clean
        if isinstance(data, (list, tuple)):
            return [single_file_clean(d, initial) for d in data]
        if not data:
            return []
        return [single_file_clean(data, initial)]


class ProductForm(forms.Form):
    title = forms.CharField(
        max_length=100,
        widget=forms.TextInput(attrs={'class': 'form-input', 'placeholder': 'Title'})
    )
    price = forms.IntegerField(
        min_value=0,
        widget=forms.NumberInput(attrs={'class': 'form-input', 'placeholder': 'Price'})
    )
    description = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-input', 'rows': 6})
    )
    location = forms.CharField(
        required=False,
        max_length=100,
        widget=forms.TextInput(attrs={'class': 'form-input', 'placeholder': 'Neighbourhood'})
    )
    images = MultipleImageField(required=False)

    def clean_title(self):
        title = self.cleaned_data['title'].strip()
        if not title:
            raise forms.ValidationError("Please enter a title.")
        return title

    def clean_images(self):
        images = self.cleaned_data.get('images') or []
        if len(images) > settings.MAX_PRODUCT_IMAGES:
            raise forms.ValidationError(
                f"You can attach up to {settings.MAX_PRODUCT_IMAGES} images."
            )
        return images


class ProductStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Product.STATUS_CHOICES)
