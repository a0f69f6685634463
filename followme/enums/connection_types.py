from enum import Enum


class ConnectionTypes(Enum):
    UDP = "udp"
    UDPIN = "udpin"
    UDPOUT = "udpout"
    TCP = "tcp"
    TCPOUT = "tcpout"
    SERIAL = "serial"
