from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, SelectField, SelectMultipleField, IntegerField, DateField
from wtforms.validators import DataRequired, Length, Optional, Regexp, NumberRange, ValidationError
from himsog.models.appointment import ALL_STATUSES
from himsog.scheduling.timeutils import TIME_PATTERN, parse_time

class BreakTimeForm(FlaskForm):
    """Form for adding a break time"""
    name = StringField('Name', validators=[DataRequired(), Length(min=2, max=100)], default='Lunch Break')
    day_of_week = IntegerField('Day of Week', validators=[NumberRange(min=0, max=6)])
    start_time = StringField('Start Time', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Use HH:MM format')])
    end_time = StringField('End Time', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Use HH:MM format')])

    def validate_end_time(self, end_time):
        # Ensure end time is after start time
        if self.start_time.errors or end_time.errors or not self.start_time.data:
            return
        if parse_time(end_time.data) <= parse_time(self.start_time.data):
            raise ValidationError('End time must be after start time.')

class BreakTimeUpdateForm(FlaskForm):
    """Partial update of a break time; ordering is checked against stored values later"""
    name = StringField('Name', validators=[Optional(), Length(min=2, max=100)])
    day_of_week = IntegerField('Day of Week', validators=[Optional(), NumberRange(min=0, max=6)])
    start_time = StringField('Start Time', validators=[Optional(), Regexp(TIME_PATTERN, message='Use HH:MM format')])
    end_time = StringField('End Time', validators=[Optional(), Regexp(TIME_PATTERN, message='Use HH:MM format')])

class AppointmentStatusForm(FlaskForm):
    """Form for updating appointment status"""
    status = SelectField('Status', validators=[DataRequired()], choices=[(s, s) for s in ALL_STATUSES])
    activity_notes = TextAreaField('Activity Notes', validators=[Optional(), Length(max=1000)])

class BulkStatusForm(FlaskForm):
    """Form for updating several appointments at once"""
    appointment_ids = SelectMultipleField('Appointments', validators=[DataRequired()], coerce=int,
                                          choices=[], validate_choice=False)
    status = SelectField('Status', validators=[DataRequired()], choices=[(s, s) for s in ALL_STATUSES])
    reason = StringField('Reason', validators=[Optional(), Length(max=100)])

class RescheduleForm(FlaskForm):
    """Form for moving an appointment to another slot"""
    date = DateField('Date', validators=[DataRequired()], format='%Y-%m-%d')
    time = StringField('Time', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Use HH:MM format')])
