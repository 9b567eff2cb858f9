from flask import jsonify

def success(data=None, message=None, status=200):
    payload = {'success': True}
    if data is not None:
        payload['data'] = data
    if message:
        payload['message'] = message
    return jsonify(payload), status

def form_error(form):
    """First validation error of a form as a failure response"""
    for field_name, messages in form.errors.items():
        field = getattr(form, field_name, None)
        label = field.label.text if field is not None else field_name
        return jsonify({'success': False, 'error': f'{label}: {messages[0]}'}), 400
    return jsonify({'success': False, 'error': 'Invalid request'}), 400
