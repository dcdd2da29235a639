from flask import jsonify

from circulation.errors import CirculationError

ERROR_STATUS = {
    "not_found": 404,
    "policy_violation": 409,
    "validation_failure": 400,
    "persistence_failure": 500,
}


def json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


def error_response(error: CirculationError):
    return json_error(str(error), ERROR_STATUS.get(error.code, 400))


def outcome_response(outcome, success_code=200):
    status = success_code if outcome.success else ERROR_STATUS.get(outcome.error, 400)
    return jsonify(outcome.to_dict()), status
