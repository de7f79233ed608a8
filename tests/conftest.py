"""Shared sample exports for the test suite."""

import pytest


LEGACY_HEADER = """OFXHEADER:100
DATA:OFXSGML
VERSION:102
SECURITY:NONE
ENCODING:USASCII
CHARSET:1252
COMPRESSION:NONE
OLDFILEUID:NONE
NEWFILEUID:NONE

"""

LEGACY_CHECKING_BODY = """<OFX>
<SIGNONMSGSRSV1>
<SONRS>
<STATUS>
<CODE>0
<SEVERITY>INFO
</STATUS>
<DTSERVER>20221003120000[0:GMT]
<LANGUAGE>ENG
<FI>
<ORG>B1
<FID>10898
</FI>
<INTU.BID>10898
</SONRS>
</SIGNONMSGSRSV1>
<BANKMSGSRSV1>
<STMTTRNRS>
<TRNUID>1
<STATUS>
<CODE>0
<SEVERITY>INFO
</STATUS>
<STMTRS>
<CURDEF>USD
<BANKACCTFROM>
<BANKID>322271627
<ACCTID>000123456789
<ACCTTYPE>CHECKING
</BANKACCTFROM>
<BANKTRANLIST>
<DTSTART>20220901000000.000[-7:MST]
<DTEND>20221001000000.000[-7:MST]
<STMTTRN>
<TRNTYPE>DEBIT
<DTPOSTED>20220915120000[0:GMT]
<TRNAMT>-42.17
<FITID>202209150
<NAME>AMZN Mktp US*1A2B3C
<MEMO>Online purchase
</STMTTRN>
<STMTTRN>
<TRNTYPE>CREDIT
<DTPOSTED>20220930120000[0:GMT]
<TRNAMT>1500.00
<FITID>202209300
<NAME>ACME CORP PAYROLL
</STMTTRN>
<STMTTRN>
<TRNTYPE>CHECK
<DTPOSTED>20220920120000[0:GMT]
<TRNAMT>-20.00
<FITID>202209200
<CHECKNUM>1001
<NAME>CHECK 1001
</STMTTRN>
</BANKTRANLIST>
<LEDGERBAL>
<BALAMT>1234.56
<DTASOF>20221001120000[0:GMT]
</LEDGERBAL>
</STMTRS>
</STMTTRNRS>
</BANKMSGSRSV1>
</OFX>
"""

MODERN_HEADER = """<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<?OFX OFXHEADER="200" VERSION="220" SECURITY="NONE" OLDFILEUID="NONE" NEWFILEUID="NONE"?>
"""

MODERN_CREDIT_CARD_BODY = """<OFX>
  <SIGNONMSGSRSV1>
    <SONRS>
      <STATUS>
        <CODE>0</CODE>
        <SEVERITY>INFO</SEVERITY>
      </STATUS>
      <DTSERVER>20221005120000[0:GMT]</DTSERVER>
      <LANGUAGE>ENG</LANGUAGE>
      <FI>
        <ORG>Citi</ORG>
        <FID>24909</FID>
      </FI>
    </SONRS>
  </SIGNONMSGSRSV1>
  <CREDITCARDMSGSRSV1>
    <CCSTMTTRNRS>
      <TRNUID>0</TRNUID>
      <STATUS>
        <CODE>0</CODE>
        <SEVERITY>INFO</SEVERITY>
      </STATUS>
      <CCSTMTRS>
        <CURDEF>USD</CURDEF>
        <CCACCTFROM>
          <ACCTID>4111111111111111</ACCTID>
        </CCACCTFROM>
        <BANKTRANLIST>
          <DTSTART>20220905000000[-5:EST]</DTSTART>
          <DTEND>20221004000000[-5:EST]</DTEND>
          <STMTTRN>
            <TRNTYPE>DEBIT</TRNTYPE>
            <DTPOSTED>20220912000000[-5:EST]</DTPOSTED>
            <TRNAMT>-35.20</TRNAMT>
            <FITID>320220912001</FITID>
            <NAME>SHELL OIL 57442</NAME>
            <MEMO>FUEL</MEMO>
          </STMTTRN>
          <STMTTRN>
            <TRNTYPE>CREDIT</TRNTYPE>
            <DTPOSTED>20220925000000[-5:EST]</DTPOSTED>
            <TRNAMT>500.00</TRNAMT>
            <FITID>320220925001</FITID>
            <NAME>PAYMENT THANK YOU</NAME>
          </STMTTRN>
        </BANKTRANLIST>
        <LEDGERBAL>
          <BALAMT>-812.44</BALAMT>
          <DTASOF>20221004000000[-5:EST]</DTASOF>
        </LEDGERBAL>
      </CCSTMTRS>
    </CCSTMTTRNRS>
  </CREDITCARDMSGSRSV1>
</OFX>
"""


@pytest.fixture
def legacy_checking_export():
    return LEGACY_HEADER + LEGACY_CHECKING_BODY


@pytest.fixture
def modern_credit_card_export():
    return MODERN_HEADER + MODERN_CREDIT_CARD_BODY
