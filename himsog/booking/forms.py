from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, SelectMultipleField, DateField
from wtforms.validators import DataRequired, Length, Email, Optional, Regexp
from himsog.scheduling.timeutils import TIME_PATTERN

class BookingForm(FlaskForm):
    """Form for booking an appointment with a provider"""
    service_ids = SelectMultipleField('Services', validators=[DataRequired()], coerce=int)
    date = DateField('Date', validators=[DataRequired()], format='%Y-%m-%d')
    time = StringField('Time', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Use HH:MM format')])
    patient_name = StringField('Patient Name', validators=[DataRequired(), Length(min=2, max=100)])
    patient_email = StringField('Patient Email', validators=[DataRequired(), Email(), Length(max=120)])
    patient_phone = StringField('Patient Phone', validators=[Optional(), Length(max=20)])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=500)])

    def patient_info(self):
        return {
            'patient_name': self.patient_name.data,
            'patient_email': self.patient_email.data,
            'patient_phone': self.patient_phone.data,
            'notes': self.notes.data
        }

class CancelAppointmentForm(FlaskForm):
    """Form for cancelling an appointment"""
    reason = StringField('Reason', validators=[DataRequired(), Length(max=100)])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=500)])
