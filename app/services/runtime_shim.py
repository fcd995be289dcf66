"""
SCORM Runtime Shim

Generates the SCORM 1.2 ``API`` object that packaged content looks for in its
hosting frame. The shim answers every call successfully and keeps values set
by the content in a private per-load mapping; nothing is persisted.
"""

import json
from typing import Dict

SHIM_SCRIPT_PATH = "/scorm-api.js"

# Default answers for LMSGetValue. Existing content depends on these exact values.
RUNTIME_DEFAULTS: Dict[str, str] = {
    "cmi.core.student_name": "SCORM Reader User",
    "cmi.core.student_id": "scorm-reader-user",
    "cmi.core.lesson_location": "",
    "cmi.core.credit": "credit",
    "cmi.core.lesson_status": "not attempted",
    "cmi.core.score.raw": "",
    "cmi.core.score.max": "",
    "cmi.core.score.min": "",
    "cmi.core.total_time": "PT0S",
    "cmi.core.entry": "",
    "cmi.core.exit": "",
    "cmi.suspend_data": "",
    "cmi.launch_data": "",
    "cmi.comments": "",
    "cmi.student_data.mastery_score": "",
    "cmi.student_data.max_time_allowed": "",
    "cmi.student_data.time_limit_action": "",
    "cmi.core.session_time": "PT0S",
}

NO_ERROR_CODE = "0"
NO_ERROR_STRING = "No Error"

_SHIM_TEMPLATE = """// SCORM 1.2 API shim served by the SCORM Reader
var API = (function () {
  var defaults = __DEFAULTS__;
  var data = {};

  return {
    version: "1.2",

    LMSInitialize: function (param) {
      console.log('SCORM API: LMSInitialize called with:', param);
      return "true";
    },

    LMSFinish: function (param) {
      console.log('SCORM API: LMSFinish called with:', param);
      return "true";
    },

    LMSGetValue: function (element) {
      console.log('SCORM API: LMSGetValue called for:', element);
      if (Object.prototype.hasOwnProperty.call(data, element)) {
        return data[element];
      }
      if (Object.prototype.hasOwnProperty.call(defaults, element)) {
        return defaults[element];
      }
      return "";
    },

    LMSSetValue: function (element, value) {
      console.log('SCORM API: LMSSetValue called for:', element, 'with value:', value);
      data[element] = String(value);
      return "true";
    },

    LMSCommit: function (param) {
      console.log('SCORM API: LMSCommit called with:', param);
      return "true";
    },

    LMSGetLastError: function () {
      return "__NO_ERROR_CODE__";
    },

    LMSGetErrorString: function (errorCode) {
      return "__NO_ERROR_STRING__";
    },

    LMSGetDiagnostic: function (errorCode) {
      return "__NO_ERROR_STRING__";
    }
  };
})();

if (typeof window !== 'undefined') {
  window.API = API;
  try {
    window.parent.API = API;
    window.top.API = API;
  } catch (e) {
    console.warn('SCORM API: could not publish API on parent frames:', e);
  }
}

if (typeof module !== 'undefined' && module.exports) {
  module.exports = API;
}
"""


def generate_shim() -> str:
    """Return the runtime shim script. Output is identical on every call."""
    return (
        _SHIM_TEMPLATE
        .replace("__DEFAULTS__", json.dumps(RUNTIME_DEFAULTS, indent=4))
        .replace("__NO_ERROR_CODE__", NO_ERROR_CODE)
        .replace("__NO_ERROR_STRING__", NO_ERROR_STRING)
    )


def shim_script_tag() -> str:
    """HTML tag that loads the shim into a content page"""
    return f'<script src="{SHIM_SCRIPT_PATH}"></script>'
