"""
Python source of the table runtime emitted into functions.py.

Step-for-step copies of `dmel.splines.cubic_splines` and
`dmel.lookup.lookup_table` / `calc_table_ev` under the camelCase names the
translator emits. Mode arguments are compared as text; the spline
boundary condition arrives as its numeric code.
"""

CUBIC_SPLINES = '''
def cubicSplines(x, knots, knotHeights, splineCoeffs, boundaryCondition):
    numKnots = len(knots)
    linearTail = boundaryCondition == 0 or boundaryCondition == 1  # Natural or clamped
    if x < knots[0]:  # Extrapolate left
        if linearTail:
            slope = splineCoeffs[0][1]
            return slope * (x - knots[0]) + knotHeights[0]
        index = 0
    elif x > knots[numKnots - 1]:  # Extrapolate right
        if linearTail:
            a = splineCoeffs[numKnots - 2]
            h = knots[numKnots - 1] - knots[numKnots - 2]
            slope = a[1] + 2 * a[2] * h + 3 * a[3] * h * h
            return slope * (x - knots[numKnots - 1]) + knotHeights[numKnots - 1]
        index = numKnots - 2
    else:  # Interpolate
        index = 0
        while x > knots[index + 1] and index < numKnots - 2:
            index += 1
    dx = x - knots[index]
    a = splineCoeffs[index]
    return a[0] + a[1] * dx + a[2] * dx * dx + a[3] * dx * dx * dx
'''

LOOKUP_TABLE = '''
def lookupTable(data, index, col, lookupMethod, interpolate, boundary, extrapolate,
                knots=None, knotHeights=None, splineCoeffs=None, boundaryCondition=None):
    numRows = len(data)
    if numRows == 0 or col < 1 or col >= len(data[0]):
        raise ValueError("Invalid table column: " + str(col))
    if lookupMethod == "Exact":
        for row in range(numRows):
            if index == data[row][0]:
                return data[row][col]
        return math.nan  # No match
    if lookupMethod == "Truncate":
        if index < data[0][0]:  # Below first value
            return math.nan
        if index >= data[numRows - 1][0]:  # At or above last value
            return data[numRows - 1][col]
        row = 0
        while data[row][0] < index:
            row += 1
        if index == data[row][0]:
            return data[row][col]
        return data[row - 1][col]
    val = math.nan
    if interpolate == "Linear":
        if index <= data[0][0]:  # Below or at first index
            slope = (data[1][col] - data[0][col]) / (data[1][0] - data[0][0])
            val = data[0][col] - (data[0][0] - index) * slope
        elif index > data[numRows - 1][0]:  # Above last index
            last, prev = data[numRows - 1], data[numRows - 2]
            slope = (last[col] - prev[col]) / (last[0] - prev[0])
            val = last[col] + (index - last[0]) * slope
        else:  # Between
            row = 0
            while data[row][0] < index:
                row += 1
            slope = (data[row][col] - data[row - 1][col]) / (data[row][0] - data[row - 1][0])
            val = data[row - 1][col] + (index - data[row - 1][0]) * slope
    elif interpolate == "Cubic Splines":
        val = cubicSplines(index, knots, knotHeights, splineCoeffs, boundaryCondition)

    # Check extrapolation conditions
    if extrapolate == "No":
        if index <= data[0][0]:
            val = data[0][col]
        elif index > data[numRows - 1][0]:
            val = data[numRows - 1][col]
    elif extrapolate == "Left only":  # Clamp right
        if index > data[numRows - 1][0]:
            val = data[numRows - 1][col]
    elif extrapolate == "Right only":  # Clamp left
        if index <= data[0][0]:
            val = data[0][col]
    return val
'''

CALC_TABLE_EV = '''
def calcTableEV(data, col):
    if len(data) == 0 or col < 1 or col >= len(data[0]):
        raise ValueError("Invalid table column: " + str(col))
    ev = 0.0
    for row in data:
        ev = ev + row[0] * row[col]
    return ev
'''

ONE_BASED = '''
def oneBased(a):
    """Pad a matrix with a NaN row and column so [1,1] is its first element."""
    a = np.asarray(a, dtype=float)
    return np.pad(a, ((1, 0), (1, 0)), constant_values=np.nan)
'''

RUNTIME_HELPERS = {
    "cubicSplines": CUBIC_SPLINES,
    "lookupTable": LOOKUP_TABLE,
    "calcTableEV": CALC_TABLE_EV,
    "oneBased": ONE_BASED,
}
