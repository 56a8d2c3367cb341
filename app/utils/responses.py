from flask import jsonify

def ok(data=None, message="success", status=200, **fields):
    payload = {"success": True, "message": message}
    payload.update(fields)
    if data is not None:
        payload["data"] = data
    return jsonify(payload), status

def error(message, status=400, code=None):
    return jsonify({
        "success": False,
        "error": message,
        "code": code or status
    }), status


def validation_error_response(errors):
    fields = [".".join(str(p) for p in e.get("loc", ())) for e in errors]
    return jsonify({
        "success": False,
        "error": "Validation error",
        "code": 400,
        "fields": fields,
    }), 400
