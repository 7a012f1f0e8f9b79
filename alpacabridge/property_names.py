"""
Property name forms for the Alpaca protocol.

Each property name exists in three forms:

- wire form: all lower-case, used in URL paths (``cansetccdtemperature``)
- parameter form: Pascal-case, used as PUT body keys (``CanSetCCDTemperature``)
- application form: camel-case or an alias, used as result keys
  (``canSetCcdTemperature``, ``isConnected``)

The mapping is a static table with deterministic fallback rules, so every
transform is a pure, total function of the name.
"""

import re
from enum import Enum
from typing import Dict, NamedTuple, Optional


class NameForm(Enum):
    """The three casing conventions of a property name."""
    WIRE = "wire"
    PARAMETER = "parameter"
    APPLICATION = "application"


class PropertyNameForms(NamedTuple):
    wire: str
    parameter: str
    application: str


_NAME_TABLE = (
    # Common device members
    ("connected", "Connected", "isConnected"),
    ("connecting", "Connecting", "isConnecting"),
    ("description", "Description", "description"),
    ("devicestate", "DeviceState", "deviceState"),
    ("driverinfo", "DriverInfo", "driverInfo"),
    ("driverversion", "DriverVersion", "driverVersion"),
    ("interfaceversion", "InterfaceVersion", "interfaceVersion"),
    ("name", "Name", "name"),
    ("supportedactions", "SupportedActions", "supportedActions"),
    # Telescope
    ("alignmentmode", "AlignmentMode", "alignmentMode"),
    ("altitude", "Altitude", "altitude"),
    ("aperturearea", "ApertureArea", "apertureArea"),
    ("aperturediameter", "ApertureDiameter", "apertureDiameter"),
    ("athome", "AtHome", "atHome"),
    ("atpark", "AtPark", "atPark"),
    ("axisrates", "AxisRates", "axisRates"),
    ("azimuth", "Azimuth", "azimuth"),
    ("canfindhome", "CanFindHome", "canFindHome"),
    ("canmoveaxis", "CanMoveAxis", "canMoveAxis"),
    ("canpark", "CanPark", "canPark"),
    ("canpulseguide", "CanPulseGuide", "canPulseGuide"),
    ("cansetdeclinationrate", "CanSetDeclinationRate", "canSetDeclinationRate"),
    ("cansetguiderates", "CanSetGuideRates", "canSetGuideRates"),
    ("cansetpark", "CanSetPark", "canSetPark"),
    ("cansetpierside", "CanSetPierSide", "canSetPierSide"),
    ("cansetrightascensionrate", "CanSetRightAscensionRate", "canSetRightAscensionRate"),
    ("cansettracking", "CanSetTracking", "canSetTracking"),
    ("canslew", "CanSlew", "canSlew"),
    ("canslewaltaz", "CanSlewAltAz", "canSlewAltAz"),
    ("canslewaltazasync", "CanSlewAltAzAsync", "canSlewAltAzAsync"),
    ("canslewasync", "CanSlewAsync", "canSlewAsync"),
    ("cansync", "CanSync", "canSync"),
    ("cansyncaltaz", "CanSyncAltAz", "canSyncAltAz"),
    ("canunpark", "CanUnpark", "canUnpark"),
    ("declination", "Declination", "declination"),
    ("declinationrate", "DeclinationRate", "declinationRate"),
    ("destinationsideofpier", "DestinationSideOfPier", "destinationSideOfPier"),
    ("doesrefraction", "DoesRefraction", "doesRefraction"),
    ("equatorialsystem", "EquatorialSystem", "equatorialSystem"),
    ("focallength", "FocalLength", "focalLength"),
    ("guideratedeclination", "GuideRateDeclination", "guideRateDeclination"),
    ("guideraterightascension", "GuideRateRightAscension", "guideRateRightAscension"),
    ("ispulseguiding", "IsPulseGuiding", "isPulseGuiding"),
    ("rightascension", "RightAscension", "rightAscension"),
    ("rightascensionrate", "RightAscensionRate", "rightAscensionRate"),
    ("sideofpier", "SideOfPier", "sideOfPier"),
    ("siderealtime", "SiderealTime", "siderealTime"),
    ("siteelevation", "SiteElevation", "siteElevation"),
    ("sitelatitude", "SiteLatitude", "siteLatitude"),
    ("sitelongitude", "SiteLongitude", "siteLongitude"),
    ("slewing", "Slewing", "slewing"),
    ("slewsettletime", "SlewSettleTime", "slewSettleTime"),
    ("targetdeclination", "TargetDeclination", "targetDeclination"),
    ("targetrightascension", "TargetRightAscension", "targetRightAscension"),
    ("tracking", "Tracking", "tracking"),
    ("trackingrate", "TrackingRate", "trackingRate"),
    ("trackingrates", "TrackingRates", "trackingRates"),
    ("utcdate", "UTCDate", "utcDate"),
    # Camera
    ("bayeroffsetx", "BayerOffsetX", "bayerOffsetX"),
    ("bayeroffsety", "BayerOffsetY", "bayerOffsetY"),
    ("binx", "BinX", "binX"),
    ("biny", "BinY", "binY"),
    ("camerastate", "CameraState", "cameraState"),
    ("cameraxsize", "CameraXSize", "cameraXSize"),
    ("cameraysize", "CameraYSize", "cameraYSize"),
    ("canabortexposure", "CanAbortExposure", "canAbortExposure"),
    ("canasymmetricbin", "CanAsymmetricBin", "canAsymmetricBin"),
    ("canfastreadout", "CanFastReadout", "canFastReadout"),
    ("cangetcoolerpower", "CanGetCoolerPower", "canGetCoolerPower"),
    ("cansetccdtemperature", "CanSetCCDTemperature", "canSetCcdTemperature"),
    ("canstopexposure", "CanStopExposure", "canStopExposure"),
    ("ccdtemperature", "CCDTemperature", "ccdTemperature"),
    ("cooleron", "CoolerOn", "coolerOn"),
    ("coolerpower", "CoolerPower", "coolerPower"),
    ("electronsperadu", "ElectronsPerADU", "electronsPerADU"),
    ("exposuremax", "ExposureMax", "exposureMax"),
    ("exposuremin", "ExposureMin", "exposureMin"),
    ("exposureresolution", "ExposureResolution", "exposureResolution"),
    ("fastreadout", "FastReadout", "fastReadout"),
    ("fullwellcapacity", "FullWellCapacity", "fullWellCapacity"),
    ("gain", "Gain", "gain"),
    ("gainmax", "GainMax", "gainMax"),
    ("gainmin", "GainMin", "gainMin"),
    ("gains", "Gains", "gains"),
    ("heatsinktemperature", "HeatSinkTemperature", "heatSinkTemperature"),
    ("imagearray", "ImageArray", "imageArray"),
    ("imageready", "ImageReady", "imageReady"),
    ("lastexposureduration", "LastExposureDuration", "lastExposureDuration"),
    ("lastexposurestarttime", "LastExposureStartTime", "lastExposureStartTime"),
    ("maxadu", "MaxADU", "maxADU"),
    ("maxbinx", "MaxBinX", "maxBinX"),
    ("maxbiny", "MaxBinY", "maxBinY"),
    ("numx", "NumX", "numX"),
    ("numy", "NumY", "numY"),
    ("offset", "Offset", "offset"),
    ("offsetmax", "OffsetMax", "offsetMax"),
    ("offsetmin", "OffsetMin", "offsetMin"),
    ("offsets", "Offsets", "offsets"),
    ("percentcompleted", "PercentCompleted", "percentCompleted"),
    ("pixelsizex", "PixelSizeX", "pixelSizeX"),
    ("pixelsizey", "PixelSizeY", "pixelSizeY"),
    ("readoutmode", "ReadoutMode", "readoutMode"),
    ("readoutmodes", "ReadoutModes", "readoutModes"),
    ("sensorname", "SensorName", "sensorName"),
    ("sensortype", "SensorType", "sensorType"),
    ("setccdtemperature", "SetCCDTemperature", "setCcdTemperature"),
    ("startx", "StartX", "startX"),
    ("starty", "StartY", "startY"),
    ("subexposureduration", "SubExposureDuration", "subExposureDuration"),
    # Focuser
    ("absolute", "Absolute", "absolute"),
    ("ismoving", "IsMoving", "isMoving"),
    ("maxincrement", "MaxIncrement", "maxIncrement"),
    ("maxstep", "MaxStep", "maxStep"),
    ("position", "Position", "position"),
    ("stepsize", "StepSize", "stepSize"),
    ("tempcomp", "TempComp", "tempComp"),
    ("tempcompavailable", "TempCompAvailable", "tempCompAvailable"),
    ("temperature", "Temperature", "temperature"),
    # Filter wheel
    ("focusoffsets", "FocusOffsets", "focusOffsets"),
    ("names", "Names", "names"),
    # Dome / safety monitor
    ("shutterstatus", "ShutterStatus", "shutterStatus"),
    ("issafe", "IsSafe", "isSafe"),
)

PROPERTY_NAME_TABLE: Dict[str, PropertyNameForms] = {
    wire: PropertyNameForms(wire, parameter, application)
    for wire, parameter, application in _NAME_TABLE
}

# Reverse index so any known form resolves to its table entry
_BY_ANY_FORM: Dict[str, PropertyNameForms] = {}
for _forms in PROPERTY_NAME_TABLE.values():
    _BY_ANY_FORM[_forms.application] = _forms
for _forms in PROPERTY_NAME_TABLE.values():
    _BY_ANY_FORM[_forms.wire] = _forms

_SEPARATOR = re.compile(r"[^a-zA-Z0-9]+(.)")


def lookup(name: str) -> Optional[PropertyNameForms]:
    """Return the table entry for a name given in any of its forms."""
    return _BY_ANY_FORM.get(name) or PROPERTY_NAME_TABLE.get(name.lower())


def format_property_name(name: str, form: NameForm) -> str:
    """Convert a property name to the requested form."""
    forms = lookup(name)
    if forms is not None:
        return getattr(forms, form.value)

    if form is NameForm.WIRE:
        return name.lower()
    if form is NameForm.PARAMETER:
        return name[:1].upper() + name[1:]
    camel = _SEPARATOR.sub(lambda match: match.group(1).upper(), name)
    return camel[:1].lower() + camel[1:]


def to_wire_name(name: str) -> str:
    """URL path form (lower-case)."""
    return format_property_name(name, NameForm.WIRE)


def to_parameter_name(name: str) -> str:
    """PUT body key form (Pascal-case)."""
    return format_property_name(name, NameForm.PARAMETER)


def to_application_name(name: str) -> str:
    """Result key form (camel-case or alias)."""
    return format_property_name(name, NameForm.APPLICATION)
