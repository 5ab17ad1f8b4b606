from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=[('donor', 'Donor'), ('recipient', 'Recipient')], default='donor')

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'password', 'first_name', 'last_name', 'role',
                  'blood_type', 'phone', 'date_of_birth', 'gender', 'address')

    def validate_password(self, value):
        validate_password(value)
        return value

    def validate(self, data):
        missing = [f for f in ('blood_type', 'phone', 'date_of_birth', 'gender') if not data.get(f)]
        if missing:
            raise serializers.ValidationError({f: 'This field is required.' for f in missing})
        return data

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user


class ProfileSerializer(serializers.ModelSerializer):
    next_eligible_date = serializers.DateTimeField(read_only=True)

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'first_name', 'last_name', 'role', 'blood_type',
                  'phone', 'date_of_birth', 'gender', 'address', 'medical_history',
                  'last_donation', 'donation_count', 'is_eligible', 'next_eligible_date',
                  'is_active', 'date_joined')
        read_only_fields = ('username', 'email', 'role', 'blood_type', 'date_of_birth', 'gender',
                            'last_donation', 'donation_count', 'is_eligible', 'is_active',
                            'date_joined')


class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'first_name', 'last_name', 'role', 'blood_type',
                  'phone', 'donation_count', 'last_donation', 'is_active', 'date_joined')
        read_only_fields = fields
