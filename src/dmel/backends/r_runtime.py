"""
R source of the table runtime emitted into functions.R.

Step-for-step ports of `dmel.splines.cubic_splines` and
`dmel.lookup.lookup_table` / `calc_table_ev`, shifted to R's 1-based
indexing. `col` arrives 0-based (as the translator emits it) and is
shifted on entry. Mode arguments are compared as text.
"""

CUBIC_SPLINES = r'''
cubicSplines<-function(x,knots,knotHeights,splineCoeffs,boundaryCondition){
	numKnots=length(knots)
	linearTail=(boundaryCondition==0 || boundaryCondition==1) #Natural or clamped
	if(x<knots[1]){ #Extrapolate left
		if(linearTail){
			slope=splineCoeffs[1,2]
			return(slope*(x-knots[1])+knotHeights[1])
		}
		index=1
	}
	else if(x>knots[numKnots]){ #Extrapolate right
		if(linearTail){
			a=splineCoeffs[numKnots-1,]
			h=knots[numKnots]-knots[numKnots-1]
			slope=a[2]+2*a[3]*h+3*a[4]*h*h
			return(slope*(x-knots[numKnots])+knotHeights[numKnots])
		}
		index=numKnots-1
	}
	else{ #Interpolate
		index=1
		while(x>knots[index+1] && index<numKnots-1){index=index+1}
	}
	dx=x-knots[index]
	a=splineCoeffs[index,]
	return(a[1]+a[2]*dx+a[3]*dx*dx+a[4]*dx*dx*dx)
}
'''

LOOKUP_TABLE = r'''
lookupTable<-function(data,index,col,lookupMethod,interpolate,boundary,extrapolate,knots=NULL,knotHeights=NULL,splineCoeffs=NULL,boundaryCondition=NULL){
	col=col+1 #Index from 1
	numRows=nrow(data)
	if(numRows==0 || col<2 || col>ncol(data)){stop(paste("Invalid table column:",col-1))}
	if(lookupMethod=="Exact"){
		for(row in 1:numRows){
			if(index==data[row,1]){return(data[row,col])}
		}
		return(NaN) #No match
	}
	if(lookupMethod=="Truncate"){
		if(index<data[1,1]){return(NaN)} #Below first value
		if(index>=data[numRows,1]){return(data[numRows,col])} #At or above last value
		row=1
		while(data[row,1]<index){row=row+1}
		if(index==data[row,1]){return(data[row,col])}
		return(data[row-1,col])
	}
	val=NaN
	if(interpolate=="Linear"){
		if(index<=data[1,1]){ #Below or at first index
			slope=(data[2,col]-data[1,col])/(data[2,1]-data[1,1])
			val=data[1,col]-(data[1,1]-index)*slope
		}
		else if(index>data[numRows,1]){ #Above last index
			slope=(data[numRows,col]-data[numRows-1,col])/(data[numRows,1]-data[numRows-1,1])
			val=data[numRows,col]+(index-data[numRows,1])*slope
		}
		else{ #Between
			row=1
			while(data[row,1]<index){row=row+1}
			slope=(data[row,col]-data[row-1,col])/(data[row,1]-data[row-1,1])
			val=data[row-1,col]+(index-data[row-1,1])*slope
		}
	}
	else if(interpolate=="Cubic Splines"){
		val=cubicSplines(index,knots,knotHeights,splineCoeffs,boundaryCondition)
	}

	#Check extrapolation conditions
	if(extrapolate=="No"){
		if(index<=data[1,1]){val=data[1,col]} #Below or at first index
		else if(index>data[numRows,1]){val=data[numRows,col]} #Above last index
	}
	else if(extrapolate=="Left only"){ #Clamp right
		if(index>data[numRows,1]){val=data[numRows,col]}
	}
	else if(extrapolate=="Right only"){ #Clamp left
		if(index<=data[1,1]){val=data[1,col]}
	}
	return(val)
}
'''

CALC_TABLE_EV = r'''
calcTableEV<-function(data,col){
	col=col+1 #Index from 1
	if(nrow(data)==0 || col<2 || col>ncol(data)){stop(paste("Invalid table column:",col-1))}
	ev=0
	for(r in 1:nrow(data)){
		ev=ev+data[r,1]*data[r,col]
	}
	return(ev)
}
'''

RUNTIME_HELPERS = {
    "cubicSplines": CUBIC_SPLINES,
    "lookupTable": LOOKUP_TABLE,
    "calcTableEV": CALC_TABLE_EV,
}
