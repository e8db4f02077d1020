# rooms/forms.py

# Import forms from django because this file defines the validation for room API requests.
from django import forms
# Import models from .models because the room forms are based on them.
from .models import Room, RoomMember


# Used for creating a new study room
class RoomForm(forms.ModelForm):
    imageUrl = forms.URLField(required=False)

    class Meta:
        model = Room
        fields = ['name', 'description']


class AddMemberForm(forms.Form):
    userId = forms.IntegerField(min_value=1)
    role = forms.ChoiceField(
        choices=[(RoomMember.ADMIN, 'Admin'), (RoomMember.MEMBER, 'Member')], required=False,
    )

    def clean_role(self):
        return self.cleaned_data.get('role') or RoomMember.MEMBER


# Used for both subjects and subcategories, which only carry a name
class NameForm(forms.Form):
    name = forms.CharField(max_length=200)


class FileUploadForm(forms.Form):
    file = forms.FileField()
    fileName = forms.CharField(max_length=255, required=False)
    roomId = forms.IntegerField(required=False, min_value=1)
    subjectId = forms.IntegerField(required=False, min_value=1)
    subcategoryId = forms.IntegerField(required=False, min_value=1)
