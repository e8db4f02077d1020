# accounts/forms.py

# Import forms from django because every request body here is validated by a form.
from django import forms
# Import UserCreationForm from django.contrib.auth.forms because registration builds on it.
from django.contrib.auth.forms import UserCreationForm
# Import User, Status from .models because the model forms save them.
from .models import User, Status


class CustomUserCreationForm(UserCreationForm):
    class Meta(UserCreationForm.Meta):
        model = User
        fields = ('email', 'first_name', 'last_name')

    def clean_email(self):
        email = self.cleaned_data.get('email').lower()
        if User.objects.filter(email=email).exists():
            raise forms.ValidationError("An account with this email already exists.")
        return email


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class ProfileUpdateForm(forms.ModelForm):
    class Meta:
        model = User
        fields = ['username', 'bio', 'status']

    def clean_username(self):
        # Empty handles are stored as NULL so the unique index ignores them
        return self.cleaned_data.get('username') or None


class FriendRequestForm(forms.Form):
    addresseeId = forms.IntegerField(min_value=1)


class StatusForm(forms.ModelForm):
    type = forms.ChoiceField(choices=Status.TYPE_CHOICES, required=False)

    class Meta:
        model = Status
        fields = ['content', 'type', 'expires_at']

    def clean_type(self):
        return self.cleaned_data.get('type') or 'achievement'
